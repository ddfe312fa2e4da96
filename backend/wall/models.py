"""
Data Models for Campus Wall
===========================

1. Post carries two denormalized counters (like_count, comment_count) and a
   `version` column. Counters are only ever written through wall.ledger,
   which uses `version` as a compare-and-swap token.

2. Comment and Post are soft-deleted through the `hidden` flag. Rows are
   never physically removed by the engine.

3. Like is a plain join row (post, user). Existence is the liked state.

4. SchoolProfile is the identity collaborator's view of a user: the school
   domain used to partition the campus wall.

5. VerificationCode is a TTL'd table of e-mail codes, looked up by
   (email, code, purpose).

Indexes Strategy:
-----------------
- post (wall, hidden, created_at) / (wall, hidden, like_count): national feed sorts
- post (wall, school_domain, hidden, created_at): campus feed
- comment (post, hidden, created_at): comment listing for a post
- like (post, user): unique, toggle lookup
- verificationcode (email, code, purpose): code verification
"""

from django.conf import settings
from django.db import models
from django.utils import timezone


class SchoolProfile(models.Model):
    """School domain of a user. Null means the user cannot see campus walls."""
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='school_profile'
    )
    school_domain = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True
    )

    def __str__(self):
        return f"{self.user_id} @ {self.school_domain or '-'}"


class Post(models.Model):
    """
    A wall post, scoped to the campus wall (one school domain) or the
    national wall.

    INVARIANTS:
    - school_domain is set iff wall == campus
    - like_count equals the number of Like rows for the post
    - like_count, comment_count >= 0
    - wall is fixed at creation
    """

    class Wall(models.TextChoices):
        CAMPUS = 'campus', 'Campus'
        NATIONAL = 'national', 'National'

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='wall_posts'
    )
    content = models.TextField()
    wall = models.CharField(max_length=16, choices=Wall.choices)
    school_domain = models.CharField(max_length=255, null=True, blank=True)

    like_count = models.PositiveIntegerField(default=0)
    comment_count = models.PositiveIntegerField(default=0)
    hidden = models.BooleanField(default=False)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    # Optimistic concurrency token, bumped by every counter/hidden update
    version = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['wall', 'hidden', '-created_at'], name='wall_post_recent_idx'),
            models.Index(fields=['wall', 'hidden', '-like_count'], name='wall_post_liked_idx'),
            models.Index(
                fields=['wall', 'school_domain', 'hidden', '-created_at'],
                name='wall_post_campus_idx'
            ),
        ]

    def __str__(self):
        return f"{self.wall} post {self.id} by {self.author_id}"

    @property
    def is_campus(self):
        return self.wall == self.Wall.CAMPUS


class Comment(models.Model):
    """Flat comment on a post. Only its author may hide or unhide it."""
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='wall_comments'
    )
    text = models.TextField()
    hidden = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)
    version = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['post', 'hidden', 'created_at'], name='wall_comment_post_idx'),
        ]

    def __str__(self):
        return f"Comment {self.id} by {self.author_id} on {self.post_id}"


class Like(models.Model):
    """
    One row per (post, user). The toggle checks for the row before inserting;
    the unique constraint turns a racing duplicate insert into an
    IntegrityError, which rolls back the whole toggle.
    """
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='likes'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='wall_likes'
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['post', 'user'],
                name='unique_like_per_user_per_post'
            )
        ]

    def __str__(self):
        return f"{self.user_id} liked post {self.post_id}"


class VerificationCode(models.Model):
    """
    Expiring e-mail verification code.

    Stored in the database so every service instance sees the same codes and
    restarts do not lose them. Rows are deleted when consumed; expired rows
    are removed by identity.purge_expired_codes().
    """

    class Purpose(models.TextChoices):
        REGISTER = 'register', 'Register'
        LOGIN = 'login', 'Login'

    email = models.EmailField()
    code = models.CharField(max_length=6)
    purpose = models.CharField(max_length=20, choices=Purpose.choices)
    expires_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=['email', 'code', 'purpose'], name='wall_code_lookup_idx'),
        ]

    def __str__(self):
        return f"{self.purpose} code for {self.email}"

    def is_expired(self, now=None):
        return self.expires_at < (now or timezone.now())
