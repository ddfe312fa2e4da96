"""
DRF Serializers
===============

Input serializers only parse the request body; the content rules (length,
wall, ownership) live in wall.services so every caller gets the same
checks. Output serializers render authors anonymously: an opaque id and
nothing else.
"""

from rest_framework import serializers

from .models import Post, Comment, VerificationCode


class AnonymousAuthorField(serializers.Field):
    """Renders the author FK as {'id': ..., 'is_anonymous': True}."""

    def __init__(self, **kwargs):
        kwargs['read_only'] = True
        kwargs.setdefault('source', 'author_id')
        super().__init__(**kwargs)

    def to_representation(self, value):
        return {'id': str(value), 'is_anonymous': True}


class PostSerializer(serializers.ModelSerializer):
    author = AnonymousAuthorField()
    likes = serializers.IntegerField(source='like_count', read_only=True)
    comments = serializers.IntegerField(source='comment_count', read_only=True)
    liked = serializers.SerializerMethodField()

    class Meta:
        model = Post
        fields = [
            'id',
            'content',
            'wall',
            'author',
            'likes',
            'comments',
            'liked',
            'hidden',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_liked(self, obj):
        # Set by queries.with_liked(); absent on freshly created posts
        return bool(getattr(obj, 'liked', False))


class CommentSerializer(serializers.ModelSerializer):
    author = AnonymousAuthorField()
    post_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Comment
        fields = ['id', 'post_id', 'text', 'author', 'hidden', 'created_at']
        read_only_fields = fields


class PostCreateSerializer(serializers.Serializer):
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)
    wall = serializers.CharField(required=False, allow_blank=True)


class CommentCreateSerializer(serializers.Serializer):
    text = serializers.CharField(allow_blank=True, trim_whitespace=False)


class SendCodeSerializer(serializers.Serializer):
    email = serializers.EmailField()
    purpose = serializers.ChoiceField(choices=VerificationCode.Purpose.choices)


class EmailCodeSerializer(serializers.Serializer):
    email = serializers.EmailField()
    code = serializers.RegexField(r'^\d{6}$')


def pagination_info(result):
    return {
        'page': result.page,
        'limit': result.size,
        'total': result.total,
        'total_pages': result.total_pages,
    }
