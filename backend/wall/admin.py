"""
Django Admin Configuration for Wall Models
"""
from django.contrib import admin
from .models import Post, Comment, Like, SchoolProfile, VerificationCode


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ['id', 'wall', 'school_domain', 'author', 'like_count',
                    'comment_count', 'hidden', 'created_at']
    list_filter = ['wall', 'hidden', 'created_at']
    search_fields = ['content', 'school_domain']
    # Counters and the version token are owned by wall.ledger; hidden only
    # changes through services.hide_post/unhide_post, which cascade
    readonly_fields = [
        'author', 'wall', 'school_domain', 'hidden',
        'like_count', 'comment_count', 'version', 'created_at', 'updated_at',
    ]

    def has_add_permission(self, request):
        # Posts are created through services.create_post
        return False

    def has_delete_permission(self, request, obj=None):
        # Soft delete only
        return False


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ['id', 'post', 'author', 'hidden', 'created_at']
    list_filter = ['hidden', 'created_at']
    search_fields = ['text']
    readonly_fields = ['post', 'author', 'hidden', 'version', 'created_at']

    def has_add_permission(self, request):
        # A Comment added here would bypass comment_count
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Like)
class LikeAdmin(admin.ModelAdmin):
    list_display = ['user', 'post', 'created_at']
    list_filter = ['created_at']

    def has_add_permission(self, request):
        # A Like added here would bypass like_count
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(SchoolProfile)
class SchoolProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'school_domain']
    search_fields = ['school_domain', 'user__email']


@admin.register(VerificationCode)
class VerificationCodeAdmin(admin.ModelAdmin):
    list_display = ['email', 'purpose', 'expires_at', 'created_at']
    list_filter = ['purpose']
    readonly_fields = ['email', 'code', 'purpose', 'expires_at', 'created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
