from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from apps.utils.models import TimestampedModel, SingletonModel


class BlogStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    PUBLISHED = "PUBLISHED", "Published"


class MetaOption(models.TextChoices):
    HOME = "home", "Home"
    KNOW_OUR_PEPPER = "know_our_pepper", "Know Our Pepper"
    ARTICLES = "articles", "Articles"
    CONTACT_US = "contact_us", "Contact Us"
    TRACK_ORDER = "track_order", "Track Order"
    BOOK_YOUR_PEPPER = "book_your_pepper", "Book Your Pepper"
    LOGIN = "login", "Login"
    TERMS = "terms", "Terms"
    PRIVACY_POLICY = "privacy_policy", "Privacy Policy"


class BlogCategory(TimestampedModel):
    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=120, unique=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = "Blog categories"

    def __str__(self):
        return self.name


class BlogTag(TimestampedModel):
    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=120, unique=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class BlogPost(TimestampedModel):
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=280, unique=True)
    excerpt = models.TextField(blank=True, default="")
    content = models.TextField()
    thumbnail = models.FileField(upload_to='blog/thumbnails/', blank=True, null=True)

    seo_title = models.CharField(max_length=255, blank=True, default="")
    seo_description = models.TextField(blank=True, default="")
    seo_keywords = models.CharField(max_length=500, blank=True, default="")

    status = models.CharField(
        max_length=20, choices=BlogStatus.choices, default=BlogStatus.DRAFT, db_index=True
    )
    published_at = models.DateTimeField(null=True, blank=True)

    categories = models.ManyToManyField(BlogCategory, related_name='posts', blank=True)
    tags = models.ManyToManyField(BlogTag, related_name='posts', blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.title


class Testimonial(TimestampedModel):
    name = models.CharField(max_length=255)
    place = models.CharField(max_length=255)
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    message = models.TextField()
    active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.rating}/5)"


class SiteMeta(TimestampedModel):
    """
    SEO metadata for one storefront page.
    """
    option = models.CharField(max_length=30, choices=MetaOption.choices, unique=True)
    title = models.CharField(max_length=255)
    description = models.TextField()
    keywords = models.TextField(blank=True, default="")
    canonical_url = models.CharField(max_length=500, blank=True, default="")
    image = models.FileField(upload_to='meta/', blank=True, null=True)

    def __str__(self):
        return self.option


class Policy(SingletonModel):
    terms = models.TextField(blank=True, null=True)
    privacy_policy = models.TextField(blank=True, null=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Policy"

    def __str__(self):
        return "Policy"


class ContactDetails(SingletonModel):
    EDITABLE_FIELDS = ('email', 'phone', 'address', 'instagram', 'facebook', 'youtube')

    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=20, blank=True, default="")
    address = models.TextField(blank=True, default="")
    instagram = models.CharField(max_length=500, blank=True, default="")
    facebook = models.CharField(max_length=500, blank=True, default="")
    youtube = models.CharField(max_length=500, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Contact details"

    def __str__(self):
        return "Contact details"
