"""
Request-layer tests: status codes, response shapes and the e-mail login
flow, through DRF's APIClient.
"""

from django.test import TestCase
from rest_framework.test import APIClient

from wall.models import Post, VerificationCode
from wall.services import add_comment

from .builders import make_post, make_posts_at, make_user


class ApiTestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.student = make_user('student', 'mit.edu')
        self.rival = make_user('rival', 'stanford.edu')
        self.client.force_authenticate(user=self.student)


class PostEndpointsTestCase(ApiTestCase):

    def test_create_post(self):
        response = self.client.post('/api/v1/posts/', {'content': 'Hi', 'wall': 'campus'}, format='json')

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body['content'], 'Hi')
        self.assertEqual(body['wall'], 'campus')
        self.assertEqual((body['likes'], body['comments'], body['liked']), (0, 0, False))
        self.assertEqual(body['author'], {'id': str(self.student.id), 'is_anonymous': True})

    def test_author_identity_not_exposed(self):
        response = self.client.post('/api/v1/posts/', {'content': 'Hi'}, format='json')

        self.assertNotIn('student', response.content.decode())

    def test_create_rejects_empty_content(self):
        response = self.client.post('/api/v1/posts/', {'content': '   '}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Post content cannot be empty')

    def test_create_requires_content_field(self):
        response = self.client.post('/api/v1/posts/', {}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('content', response.json()['details'])

    def test_campus_post_without_domain(self):
        outsider = make_user('outsider')
        self.client.force_authenticate(user=outsider)

        response = self.client.post('/api/v1/posts/', {'content': 'Hi', 'wall': 'campus'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Post.objects.exists())

    def test_list_posts(self):
        make_posts_at(self.student, 3)

        response = self.client.get('/api/v1/posts/', {'wall': 'national', 'limit': 2, 'sort': 'OLDEST'})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([p['content'] for p in body['data']], ['Post 0', 'Post 1'])
        self.assertEqual(body['pagination'], {'page': 1, 'limit': 2, 'total': 3, 'total_pages': 2})

    def test_list_bad_wall(self):
        response = self.client.get('/api/v1/posts/', {'wall': 'global'})
        self.assertEqual(response.status_code, 400)

    def test_get_post_forbidden_cross_school(self):
        post = make_post(self.rival, wall=Post.Wall.CAMPUS)

        response = self.client.get(f'/api/v1/posts/{post.id}/')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {'error': 'You do not have access to posts from other schools'})

    def test_get_missing_post(self):
        response = self.client.get('/api/v1/posts/999/')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'error': 'Post not found'})

    def test_unauthenticated(self):
        self.client.force_authenticate(user=None)

        response = self.client.get('/api/v1/posts/')
        self.assertEqual(response.status_code, 403)


class InteractionEndpointsTestCase(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.post = make_post(self.student)

    def test_like_toggle(self):
        url = f'/api/v1/posts/{self.post.id}/likes/'

        self.assertEqual(self.client.post(url).json(), {'liked': True})
        self.assertTrue(self.client.get(f'/api/v1/posts/{self.post.id}/').json()['liked'])
        self.assertEqual(self.client.post(url).json(), {'liked': False})

    def test_comment_flow(self):
        url = f'/api/v1/posts/{self.post.id}/comments/'

        created = self.client.post(url, {'text': 'First'}, format='json')
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()['post_id'], self.post.id)

        listing = self.client.get(url).json()
        self.assertEqual([c['text'] for c in listing['data']], ['First'])
        self.assertEqual(listing['pagination']['total'], 1)

    def test_comment_hide_and_unhide(self):
        comment = add_comment(self.post.id, self.student.id, 'mine')
        url = f'/api/v1/posts/{self.post.id}/comments/{comment.id}/hide/'

        self.assertTrue(self.client.post(url).json()['hidden'])
        self.assertEqual(self.client.get(f'/api/v1/posts/{self.post.id}/').json()['comments'], 0)
        self.assertFalse(self.client.delete(url).json()['hidden'])

    def test_comment_hide_by_other_user(self):
        comment = add_comment(self.post.id, self.student.id, 'mine')
        self.client.force_authenticate(user=self.rival)

        response = self.client.post(f'/api/v1/posts/{self.post.id}/comments/{comment.id}/hide/')

        self.assertEqual(response.status_code, 403)

    def test_post_hide_and_unhide(self):
        url = f'/api/v1/posts/{self.post.id}/hide/'

        self.assertTrue(self.client.post(url).json()['hidden'])
        listing = self.client.get('/api/v1/posts/', {'wall': 'national'}).json()
        self.assertEqual(listing['data'], [])

        self.assertFalse(self.client.delete(url).json()['hidden'])

    def test_post_hide_by_other_user(self):
        self.client.force_authenticate(user=self.rival)

        response = self.client.post(f'/api/v1/posts/{self.post.id}/hide/')

        self.assertEqual(response.status_code, 403)


class AuthEndpointsTestCase(TestCase):

    def setUp(self):
        self.client = APIClient()

    def send_code(self, email, purpose):
        response = self.client.post(
            '/api/v1/auth/email/send-code', {'email': email, 'purpose': purpose}, format='json'
        )
        self.assertEqual(response.status_code, 200)
        return VerificationCode.objects.filter(email=email, purpose=purpose).latest('created_at').code

    def test_whoami_anonymous(self):
        response = self.client.get('/api/v1/auth/whoami')

        self.assertEqual(response.json(), {'authenticated': False, 'user_id': None, 'school_domain': None})

    def test_register_then_whoami(self):
        code = self.send_code('alice@mit.edu', 'register')

        response = self.client.post(
            '/api/v1/auth/register/email', {'email': 'alice@mit.edu', 'code': code}, format='json'
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['school_domain'], 'mit.edu')

        whoami = self.client.get('/api/v1/auth/whoami').json()
        self.assertTrue(whoami['authenticated'])
        self.assertEqual(whoami['school_domain'], 'mit.edu')

    def test_login_then_post(self):
        code = self.send_code('bob@gmail.com', 'login')

        response = self.client.post(
            '/api/v1/auth/login/email', {'email': 'bob@gmail.com', 'code': code}, format='json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()['school_domain'])

        created = self.client.post('/api/v1/posts/', {'content': 'Hi', 'wall': 'national'}, format='json')
        self.assertEqual(created.status_code, 201)

    def test_register_requires_school_email(self):
        response = self.client.post(
            '/api/v1/auth/email/send-code', {'email': 'bob@gmail.com', 'purpose': 'register'}, format='json'
        )
        self.assertEqual(response.status_code, 400)

    def test_password_reset_codes_not_issued(self):
        response = self.client.post(
            '/api/v1/auth/email/send-code', {'email': 'alice@mit.edu', 'purpose': 'reset_password'}, format='json'
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(VerificationCode.objects.exists())

    def test_register_existing_email_conflicts(self):
        make_user('alice', 'mit.edu')
        code = self.send_code('alice@mit.edu', 'register')

        response = self.client.post(
            '/api/v1/auth/register/email', {'email': 'alice@mit.edu', 'code': code}, format='json'
        )
        self.assertEqual(response.status_code, 409)

    def test_malformed_code(self):
        response = self.client.post(
            '/api/v1/auth/login/email', {'email': 'bob@gmail.com', 'code': '12ab'}, format='json'
        )
        self.assertEqual(response.status_code, 400)
