import json

from rest_framework import serializers

from .models import (
    BlogCategory, BlogTag, BlogPost, BlogStatus, Testimonial, SiteMeta, MetaOption, Policy, ContactDetails,
)


class BlogCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = BlogCategory
        fields = ['id', 'name', 'slug', 'created_at']
        read_only_fields = ['id', 'slug', 'created_at']


class BlogTagSerializer(serializers.ModelSerializer):
    class Meta:
        model = BlogTag
        fields = ['id', 'name', 'slug', 'created_at']
        read_only_fields = ['id', 'slug', 'created_at']


class TaxonomyInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)


class BlogPostSerializer(serializers.ModelSerializer):
    categories = BlogCategorySerializer(many=True, read_only=True)
    tags = BlogTagSerializer(many=True, read_only=True)

    class Meta:
        model = BlogPost
        fields = [
            'id', 'title', 'slug', 'excerpt', 'content', 'thumbnail',
            'seo_title', 'seo_description', 'seo_keywords',
            'status', 'published_at', 'categories', 'tags', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class BlogPostInputSerializer(serializers.Serializer):
    """
    multipart/form-data: `category` and `tags` arrive as text and are parsed by the service.
    """
    title = serializers.CharField(max_length=255)
    excerpt = serializers.CharField(required=False, allow_blank=True)
    content = serializers.CharField()
    seo_title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    seo_description = serializers.CharField(required=False, allow_blank=True)
    seo_keywords = serializers.CharField(max_length=500, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=BlogStatus.choices, required=False)
    published_at = serializers.DateTimeField(required=False, allow_null=True)
    thumbnail = serializers.FileField(required=False, allow_null=True)


class TestimonialSerializer(serializers.ModelSerializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)

    class Meta:
        model = Testimonial
        fields = ['id', 'name', 'place', 'rating', 'message', 'active', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class MetaValueSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    # line breaks are kept as typed
    description = serializers.CharField(trim_whitespace=False)
    keywords = serializers.CharField(required=False, allow_blank=True)
    canonical_url = serializers.CharField(max_length=500, required=False, allow_blank=True)


class MetaUpdateSerializer(serializers.Serializer):
    option = serializers.ChoiceField(
        choices=MetaOption.choices,
        error_messages={"invalid_choice": f"option must be one of: {', '.join(MetaOption.values)}"},
    )
    value = serializers.JSONField()
    image = serializers.FileField(required=False, allow_null=True)

    def validate_value(self, value):
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                raise serializers.ValidationError("value must be a JSON object.")
        serializer = MetaValueSerializer(data=value)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data


class SiteMetaSerializer(serializers.ModelSerializer):
    class Meta:
        model = SiteMeta
        fields = ['option', 'title', 'description', 'keywords', 'canonical_url', 'image', 'updated_at']
        read_only_fields = fields


class PolicySerializer(serializers.ModelSerializer):
    terms = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    privacy_policy = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = Policy
        fields = ['terms', 'privacy_policy', 'updated_at']
        read_only_fields = ['updated_at']


class ContactDetailsSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContactDetails
        fields = ['email', 'phone', 'address', 'instagram', 'facebook', 'youtube', 'updated_at']
        read_only_fields = fields


class ContactFieldSerializer(serializers.Serializer):
    field = serializers.CharField(max_length=30)
    value = serializers.CharField(allow_blank=True)
