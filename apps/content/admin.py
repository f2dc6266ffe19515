from django.contrib import admin

from .models import BlogCategory, BlogTag, BlogPost, Testimonial, SiteMeta, Policy, ContactDetails


@admin.register(BlogCategory, BlogTag)
class TaxonomyAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'created_at')
    search_fields = ('name',)
    prepopulated_fields = {'slug': ('name',)}


@admin.register(BlogPost)
class BlogPostAdmin(admin.ModelAdmin):
    list_display = ('title', 'status', 'published_at', 'created_at')
    list_filter = ('status', 'categories', 'tags')
    search_fields = ('title', 'excerpt', 'content')
    prepopulated_fields = {'slug': ('title',)}
    filter_horizontal = ('categories', 'tags')


@admin.register(Testimonial)
class TestimonialAdmin(admin.ModelAdmin):
    list_display = ('name', 'place', 'rating', 'active', 'created_at')
    list_filter = ('active', 'rating')
    search_fields = ('name', 'place', 'message')


@admin.register(SiteMeta)
class SiteMetaAdmin(admin.ModelAdmin):
    list_display = ('option', 'title', 'updated_at')


@admin.register(Policy, ContactDetails)
class SingletonAdmin(admin.ModelAdmin):

    def has_delete_permission(self, request, obj=None):
        return False
