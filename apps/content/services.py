import json
import logging

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.text import slugify
from rest_framework import status

from apps.utils.exceptions import BusinessLogicException
from .models import (
    BlogCategory, BlogTag, BlogPost, BlogStatus, Testimonial, SiteMeta, Policy, ContactDetails,
)

logger = logging.getLogger(__name__)


def parse_name_list(value) -> list:
    """
    Multipart forms send lists as text: '["a","b"]', "['a','b']", "[a, b]" or "a,b".
    """
    if value in (None, ""):
        return []
    if isinstance(value, (list, tuple)):
        if len(value) == 1:
            return parse_name_list(str(value[0]))
        return [str(n).strip() for n in value if str(n).strip()]

    text = str(value).strip()
    try:
        parsed = json.loads(text.replace("'", '"'))
    except ValueError:
        parsed = text.strip("[]").replace("'", "").split(",")

    if not isinstance(parsed, list):
        parsed = [parsed]
    return [str(n).strip() for n in parsed if str(n).strip()]


def unique_slug(model, text: str, exclude_pk=None) -> str:
    base = slugify(text)[:250] or "post"
    slug, n = base, 2
    qs = model.objects.all()
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    while qs.filter(slug=slug).exists():
        slug = f"{base}-{n}"
        n += 1
    return slug


class TaxonomyService:
    """
    Blog categories and tags share the same rules.
    """
    LABELS = {BlogCategory: "Category", BlogTag: "Tag"}

    @staticmethod
    def create(model, name: str):
        label = TaxonomyService.LABELS[model]
        name = name.strip()
        if model.objects.filter(name__iexact=name).exists():
            raise BusinessLogicException(f"{label} already exists", code=f"{label.lower()}_exists")
        try:
            with transaction.atomic():
                return model.objects.create(name=name, slug=unique_slug(model, name))
        except IntegrityError:
            raise BusinessLogicException(f"{label} already exists", code=f"{label.lower()}_exists")

    @staticmethod
    def list_all(model):
        return model.objects.order_by('name')

    @staticmethod
    def delete(model, pk: int) -> None:
        label = TaxonomyService.LABELS[model]
        deleted, _ = model.objects.filter(pk=pk).delete()
        if not deleted:
            raise BusinessLogicException(f"No {label.lower()} with the id", code=f"{label.lower()}_not_found")

    @staticmethod
    def resolve(model, names) -> list:
        label = TaxonomyService.LABELS[model]
        resolved = []
        for name in parse_name_list(names):
            obj = model.objects.filter(name__iexact=name).first()
            if obj is None:
                raise BusinessLogicException(f"Unknown {label.lower()}: {name}", code=f"unknown_{label.lower()}")
            resolved.append(obj)
        return resolved


class BlogService:

    @staticmethod
    def _stamp_publish(post: BlogPost):
        if post.status == BlogStatus.PUBLISHED and not post.published_at:
            post.published_at = timezone.now()

    @staticmethod
    @transaction.atomic
    def create(data: dict, categories=None, tags=None) -> BlogPost:
        category_objs = TaxonomyService.resolve(BlogCategory, categories)
        tag_objs = TaxonomyService.resolve(BlogTag, tags)

        post = BlogPost(**data)
        post.slug = unique_slug(BlogPost, post.title)
        BlogService._stamp_publish(post)
        post.save()
        post.categories.set(category_objs)
        post.tags.set(tag_objs)

        logger.info(f"Blog post {post.id} created ({post.status})")
        return post

    @staticmethod
    def list_posts(search=None, categories=None, tags=None, published_only=True):
        qs = BlogPost.objects.prefetch_related('categories', 'tags').order_by('-created_at')
        if published_only:
            qs = qs.filter(status=BlogStatus.PUBLISHED)
        if search:
            qs = qs.filter(
                Q(title__icontains=search) | Q(excerpt__icontains=search) | Q(content__icontains=search)
            )
        category_names = parse_name_list(categories)
        if category_names:
            query = Q()
            for name in category_names:
                query |= Q(categories__name__iexact=name)
            qs = qs.filter(query)
        tag_names = parse_name_list(tags)
        if tag_names:
            query = Q()
            for name in tag_names:
                query |= Q(tags__name__iexact=name)
            qs = qs.filter(query)
        return qs.distinct()

    @staticmethod
    def get(ident, published_only=True) -> BlogPost:
        """
        Slug first, then the numeric id; a post titled "2024" keeps its slug URL.
        """
        qs = BlogPost.objects.prefetch_related('categories', 'tags')
        if published_only:
            qs = qs.filter(status=BlogStatus.PUBLISHED)
        post = qs.filter(slug=str(ident)).first()
        if post is None and str(ident).isdigit():
            post = qs.filter(pk=int(ident)).first()
        if post is None:
            raise BusinessLogicException(
                "Blog not found", code="blog_not_found", status_code=status.HTTP_404_NOT_FOUND
            )
        return post

    @staticmethod
    def _by_pk(pk) -> BlogPost:
        post = BlogPost.objects.filter(pk=int(pk)).first() if str(pk).isdigit() else None
        if post is None:
            raise BusinessLogicException(
                "Blog not found", code="blog_not_found", status_code=status.HTTP_404_NOT_FOUND
            )
        return post

    @staticmethod
    @transaction.atomic
    def update(pk: int, data: dict, categories=None, tags=None) -> BlogPost:
        post = BlogService._by_pk(pk)
        title_changed = 'title' in data and data['title'] != post.title

        for field, value in data.items():
            setattr(post, field, value)
        if title_changed:
            post.slug = unique_slug(BlogPost, post.title, exclude_pk=post.pk)
        BlogService._stamp_publish(post)
        post.save()

        if categories is not None:
            post.categories.set(TaxonomyService.resolve(BlogCategory, categories))
        if tags is not None:
            post.tags.set(TaxonomyService.resolve(BlogTag, tags))
        return post

    @staticmethod
    def delete(pk: int) -> None:
        post = BlogService._by_pk(pk)
        if post.thumbnail:
            post.thumbnail.delete(save=False)
        post.delete()
        logger.info(f"Blog post {pk} deleted")


class TestimonialService:

    @staticmethod
    def _get(pk: int) -> Testimonial:
        try:
            return Testimonial.objects.get(pk=pk)
        except Testimonial.DoesNotExist:
            raise BusinessLogicException(
                "Testimonial not found", code="testimonial_not_found", status_code=status.HTTP_404_NOT_FOUND
            )

    @staticmethod
    def create(data: dict) -> Testimonial:
        return Testimonial.objects.create(**data)

    @staticmethod
    def list_all():
        return Testimonial.objects.order_by('-created_at')

    @staticmethod
    def list_active():
        return Testimonial.objects.filter(active=True).order_by('-created_at')

    @staticmethod
    def get(pk: int) -> Testimonial:
        return TestimonialService._get(pk)

    @staticmethod
    def update(pk: int, data: dict) -> Testimonial:
        testimonial = TestimonialService._get(pk)
        for field, value in data.items():
            setattr(testimonial, field, value)
        testimonial.save()
        return testimonial

    @staticmethod
    def delete(pk: int) -> None:
        TestimonialService._get(pk).delete()


class SiteMetaService:

    @staticmethod
    def upsert(option: str, value: dict, image=None) -> SiteMeta:
        defaults = {
            'title': value['title'],
            'description': value['description'],
            'keywords': value.get('keywords') or "",
            'canonical_url': value.get('canonical_url') or "",
        }
        meta, _ = SiteMeta.objects.update_or_create(option=option, defaults=defaults)
        if image is not None:
            meta.image = image
            meta.save(update_fields=['image', 'updated_at'])
        return meta

    @staticmethod
    def get_meta(option: str = None):
        if option:
            return SiteMeta.objects.filter(option=option).first()
        return SiteMeta.objects.order_by('option')


class PolicyService:

    @staticmethod
    def get() -> Policy:
        return Policy.load()

    @staticmethod
    def update(data: dict) -> Policy:
        policy = Policy.load()
        for field in ('terms', 'privacy_policy'):
            if field in data:
                setattr(policy, field, data[field])
        policy.save()
        return policy


class ContactDetailsService:

    @staticmethod
    def get_details() -> ContactDetails:
        return ContactDetails.load()

    @staticmethod
    def upsert_field(field: str, value) -> ContactDetails:
        if field not in ContactDetails.EDITABLE_FIELDS:
            raise BusinessLogicException("Invalid field name", code="invalid_field")

        value = (value or "").strip()
        if field == 'email' and value:
            try:
                validate_email(value)
            except ValidationError:
                raise BusinessLogicException("Enter a valid email address", code="invalid_email")

        details = ContactDetails.load()
        setattr(details, field, value)
        details.save(update_fields=[field, 'updated_at'])
        return details
