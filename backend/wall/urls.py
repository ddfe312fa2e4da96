"""
Wall App URL Configuration
"""
from django.urls import path
from .views import (
    PostListCreateView,
    PostDetailView,
    PostHideView,
    CommentListCreateView,
    CommentHideView,
    LikeToggleView,
    SendEmailCodeView,
    RegisterEmailView,
    LoginEmailView,
    WhoAmIView,
)

urlpatterns = [
    # Posts
    path('posts/', PostListCreateView.as_view(), name='post-list'),
    path('posts/<int:post_id>/', PostDetailView.as_view(), name='post-detail'),
    path('posts/<int:post_id>/hide/', PostHideView.as_view(), name='post-hide'),
    path('posts/<int:post_id>/likes/', LikeToggleView.as_view(), name='post-like'),

    # Comments
    path('posts/<int:post_id>/comments/', CommentListCreateView.as_view(), name='comment-list'),
    path(
        'posts/<int:post_id>/comments/<int:comment_id>/hide/',
        CommentHideView.as_view(),
        name='comment-hide'
    ),

    # Auth
    path('auth/email/send-code', SendEmailCodeView.as_view(), name='auth-send-code'),
    path('auth/register/email', RegisterEmailView.as_view(), name='auth-register-email'),
    path('auth/login/email', LoginEmailView.as_view(), name='auth-login-email'),
    path('auth/whoami', WhoAmIView.as_view(), name='auth-whoami'),
]
