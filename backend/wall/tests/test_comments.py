"""
Tests for comments: add, list and per-comment soft delete.

Per-comment hide/unhide walks the ledger, so comment_count always equals
the number of visible comments as long as no post-level hide happened.
"""

from django.test import TestCase, override_settings

from wall.exceptions import Forbidden, NotFound, ValidationFailed
from wall.models import Comment, Post
from wall.services import (
    add_comment,
    hide_comment,
    list_comments,
    unhide_comment,
)

from .builders import make_post, make_user


class AddCommentTestCase(TestCase):

    def setUp(self):
        self.author = make_user('author', 'mit.edu')
        self.commenter = make_user('commenter', 'mit.edu')
        self.post = make_post(self.author)

    def test_add_comment_increments_count(self):
        comment = add_comment(self.post.id, self.commenter.id, '  First!  ')

        self.assertEqual(comment.text, 'First!')
        self.assertFalse(comment.hidden)
        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 1)
        self.assertEqual(self.post.version, 1)

    def test_empty_text_rejected(self):
        for text in ('', '   ', None):
            with self.assertRaises(ValidationFailed):
                add_comment(self.post.id, self.commenter.id, text)

        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 0)

    def test_text_length_limit(self):
        add_comment(self.post.id, self.commenter.id, 'x' * 5000)

        with self.assertRaises(ValidationFailed) as ctx:
            add_comment(self.post.id, self.commenter.id, 'x' * 5001)
        self.assertIn('5000', ctx.exception.message)

        with self.assertRaises(ValidationFailed):
            add_comment(self.post.id, self.commenter.id, '  ' + 'x' * 4999)

    @override_settings(WALL_MAX_CONTENT_LENGTH=10)
    def test_length_limit_from_settings(self):
        with self.assertRaises(ValidationFailed):
            add_comment(self.post.id, self.commenter.id, 'x' * 11)

    def test_missing_post(self):
        with self.assertRaises(NotFound):
            add_comment(99999, self.commenter.id, 'hi')


class HideCommentTestCase(TestCase):

    def setUp(self):
        self.author = make_user('author', 'mit.edu')
        self.commenter = make_user('commenter', 'mit.edu')
        self.other = make_user('other', 'mit.edu')
        self.post = make_post(self.author, wall=Post.Wall.CAMPUS)
        self.comment = add_comment(self.post.id, self.commenter.id, 'hello')

    def test_hide_decrements_count(self):
        hidden = hide_comment(self.post.id, self.comment.id, self.commenter.id)

        self.assertTrue(hidden.hidden)
        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 0)

    def test_hide_is_noop_when_already_hidden(self):
        hide_comment(self.post.id, self.comment.id, self.commenter.id)
        again = hide_comment(self.post.id, self.comment.id, self.commenter.id)

        self.assertTrue(again.hidden)
        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 0)

    def test_unhide_restores_count(self):
        hide_comment(self.post.id, self.comment.id, self.commenter.id)
        restored = unhide_comment(self.post.id, self.comment.id, self.commenter.id)

        self.assertFalse(restored.hidden)
        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 1)

    def test_unhide_visible_comment_is_noop(self):
        unhide_comment(self.post.id, self.comment.id, self.commenter.id)

        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 1)

    def test_only_author_can_hide(self):
        # Not even the post author
        for user in (self.other, self.author):
            with self.assertRaises(Forbidden) as ctx:
                hide_comment(self.post.id, self.comment.id, user.id)
            self.assertEqual(ctx.exception.message, 'You can only hide your own comments')

        self.comment.refresh_from_db()
        self.assertFalse(self.comment.hidden)

    def test_only_author_can_unhide(self):
        hide_comment(self.post.id, self.comment.id, self.commenter.id)

        with self.assertRaises(Forbidden):
            unhide_comment(self.post.id, self.comment.id, self.other.id)

    def test_missing_comment(self):
        with self.assertRaises(NotFound) as ctx:
            hide_comment(self.post.id, 123456, self.commenter.id)
        self.assertEqual(ctx.exception.message, 'Comment not found')

    def test_comment_must_belong_to_post(self):
        other_post = make_post(self.author)

        with self.assertRaises(NotFound) as ctx:
            hide_comment(other_post.id, self.comment.id, self.commenter.id)
        self.assertEqual(ctx.exception.message, 'Comment does not belong to this post')

    def test_cross_school_author_loses_access(self):
        # The commenter moved schools: the campus guard runs before ownership
        profile = self.commenter.school_profile
        profile.school_domain = 'stanford.edu'
        profile.save()

        with self.assertRaises(Forbidden) as ctx:
            hide_comment(self.post.id, self.comment.id, self.commenter.id)
        self.assertIn('other schools', ctx.exception.message)

    def test_hide_bumps_comment_version(self):
        hide_comment(self.post.id, self.comment.id, self.commenter.id)

        self.comment.refresh_from_db()
        self.assertEqual(self.comment.version, 1)


class CommentCounterAccuracyTestCase(TestCase):
    """comment_count == visible comments after any add/hide/unhide sequence."""

    def setUp(self):
        self.author = make_user('author')
        self.users = [make_user(f'user{i}') for i in range(3)]
        self.post = make_post(self.author)

    def assertCounterAccurate(self):
        self.post.refresh_from_db()
        visible = Comment.objects.filter(post=self.post, hidden=False).count()
        self.assertEqual(self.post.comment_count, visible)
        self.assertGreaterEqual(self.post.comment_count, 0)

    def test_mixed_sequence(self):
        comments = []
        for i, user in enumerate(self.users * 2):
            comments.append((add_comment(self.post.id, user.id, f'comment {i}'), user))
            self.assertCounterAccurate()

        for comment, user in comments[::2]:
            hide_comment(self.post.id, comment.id, user.id)
            self.assertCounterAccurate()

        for comment, user in comments[:3]:
            unhide_comment(self.post.id, comment.id, user.id)
            self.assertCounterAccurate()

        for comment, user in comments:
            hide_comment(self.post.id, comment.id, user.id)
            hide_comment(self.post.id, comment.id, user.id)
            self.assertCounterAccurate()

        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 0)


class ListCommentsTestCase(TestCase):

    def setUp(self):
        self.author = make_user('author', 'mit.edu')
        self.post = make_post(self.author, wall=Post.Wall.CAMPUS)
        self.comments = [
            add_comment(self.post.id, self.author.id, f'comment {i}') for i in range(5)
        ]

    def test_hidden_comments_excluded(self):
        hide_comment(self.post.id, self.comments[0].id, self.author.id)

        page = list_comments(self.post.id, 1, 20, 'OLDEST', self.author.id)
        self.assertEqual(page.total, 4)
        self.assertNotIn(self.comments[0].id, [c.id for c in page.items])

    def test_newest_first(self):
        page = list_comments(self.post.id, 1, 20, 'NEWEST', self.author.id)
        self.assertEqual([c.id for c in page.items], [c.id for c in reversed(self.comments)])

    def test_like_sorts_collapse_onto_time_orders(self):
        newest = list_comments(self.post.id, 1, 20, 'NEWEST', self.author.id)
        most_liked = list_comments(self.post.id, 1, 20, 'MOST_LIKED', self.author.id)
        oldest = list_comments(self.post.id, 1, 20, 'OLDEST', self.author.id)
        least_liked = list_comments(self.post.id, 1, 20, 'LEAST_LIKED', self.author.id)

        self.assertEqual([c.id for c in newest.items], [c.id for c in most_liked.items])
        self.assertEqual([c.id for c in oldest.items], [c.id for c in least_liked.items])
        self.assertEqual([c.id for c in oldest.items], [c.id for c in self.comments])

    def test_pagination(self):
        page = list_comments(self.post.id, 2, 2, 'OLDEST', self.author.id)

        self.assertEqual([c.id for c in page.items], [self.comments[2].id, self.comments[3].id])
        self.assertEqual((page.page, page.size, page.total, page.total_pages), (2, 2, 5, 3))

    def test_guarded(self):
        rival = make_user('rival', 'stanford.edu')
        with self.assertRaises(Forbidden):
            list_comments(self.post.id, 1, 20, 'NEWEST', rival.id)

    def test_missing_post(self):
        with self.assertRaises(NotFound):
            list_comments(31337, 1, 20, 'NEWEST', self.author.id)
