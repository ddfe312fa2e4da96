"""
DRF Views
=========

Thin request layer over wall.services. Views parse input, call one service
function and render the result. Service errors (WallError) propagate to
wall.exceptions.custom_exception_handler, which maps them to status codes.

AUTHENTICATION:
---------------
Session authentication. Users log in with an e-mail code
(POST /auth/login/email); the session then identifies the caller.
"""

from django.contrib.auth import login
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import identity, services
from .serializers import (
    CommentCreateSerializer,
    CommentSerializer,
    EmailCodeSerializer,
    PostCreateSerializer,
    PostSerializer,
    SendCodeSerializer,
    pagination_info,
)


def _page_response(result, serializer_class):
    return Response({
        'data': serializer_class(result.items, many=True).data,
        'pagination': pagination_info(result),
    })


class PostListCreateView(APIView):
    """
    GET /api/v1/posts/?wall=campus|national&page=1&limit=20&sort=NEWEST
    POST /api/v1/posts/  {"content": "...", "wall": "campus"|"national"}
    """

    def get(self, request):
        params = request.query_params
        result = services.list_posts(
            wall=params.get('wall', 'campus'),
            page=params.get('page', 1),
            size=params.get('limit'),
            sort=params.get('sort'),
            caller_id=request.user.id,
        )
        return _page_response(result, PostSerializer)

    def post(self, request):
        serializer = PostCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        post = services.create_post(
            user_id=request.user.id,
            content=serializer.validated_data['content'],
            wall=serializer.validated_data.get('wall') or None,
        )
        return Response(PostSerializer(post).data, status=status.HTTP_201_CREATED)


class PostDetailView(APIView):
    """GET /api/v1/posts/<post_id>/"""

    def get(self, request, post_id):
        post = services.get_post(post_id, request.user.id)
        return Response(PostSerializer(post).data)


class CommentListCreateView(APIView):
    """
    GET /api/v1/posts/<post_id>/comments/?page=1&limit=20&sort=NEWEST
    POST /api/v1/posts/<post_id>/comments/  {"text": "..."}
    """

    def get(self, request, post_id):
        params = request.query_params
        result = services.list_comments(
            post_id,
            page=params.get('page', 1),
            size=params.get('limit'),
            sort=params.get('sort'),
            caller_id=request.user.id,
        )
        return _page_response(result, CommentSerializer)

    def post(self, request, post_id):
        serializer = CommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = services.add_comment(post_id, request.user.id, serializer.validated_data['text'])
        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


class LikeToggleView(APIView):
    """POST /api/v1/posts/<post_id>/likes/  ->  {"liked": true|false}"""

    def post(self, request, post_id):
        liked = services.toggle_like(post_id, request.user.id)
        return Response({'liked': liked})


class PostHideView(APIView):
    """
    POST /api/v1/posts/<post_id>/hide/    hide post and its comments
    DELETE /api/v1/posts/<post_id>/hide/  unhide
    """

    def post(self, request, post_id):
        post = services.hide_post(post_id, request.user.id)
        return Response(PostSerializer(post).data)

    def delete(self, request, post_id):
        post = services.unhide_post(post_id, request.user.id)
        return Response(PostSerializer(post).data)


class CommentHideView(APIView):
    """
    POST /api/v1/posts/<post_id>/comments/<comment_id>/hide/    hide comment
    DELETE /api/v1/posts/<post_id>/comments/<comment_id>/hide/  unhide
    """

    def post(self, request, post_id, comment_id):
        comment = services.hide_comment(post_id, comment_id, request.user.id)
        return Response(CommentSerializer(comment).data)

    def delete(self, request, post_id, comment_id):
        comment = services.unhide_comment(post_id, comment_id, request.user.id)
        return Response(CommentSerializer(comment).data)


# ============================================================================
# AUTH (e-mail codes)
# ============================================================================

class SendEmailCodeView(APIView):
    """
    POST /api/v1/auth/email/send-code  {"email": "...", "purpose": "register"|"login"}
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = SendCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        identity.send_email_code(
            serializer.validated_data['email'],
            serializer.validated_data['purpose'],
        )
        return Response({'message': 'Verification code sent'})


class RegisterEmailView(APIView):
    """POST /api/v1/auth/register/email  {"email": "...", "code": "123456"}"""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = EmailCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = identity.register_with_email(**serializer.validated_data)
        login(request, user)
        return Response(_user_payload(user), status=status.HTTP_201_CREATED)


class LoginEmailView(APIView):
    """POST /api/v1/auth/login/email  {"email": "...", "code": "123456"}"""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = EmailCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = identity.login_with_email(**serializer.validated_data)
        login(request, user)
        return Response(_user_payload(user))


class WhoAmIView(APIView):
    """GET /api/v1/auth/whoami"""
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        if request.user.is_authenticated:
            return Response({'authenticated': True, **_user_payload(request.user)})
        return Response({
            'authenticated': False,
            'user_id': None,
            'school_domain': None,
        })


def _user_payload(user):
    return {
        'user_id': user.id,
        'school_domain': identity.get_school_domain(user.id),
    }
