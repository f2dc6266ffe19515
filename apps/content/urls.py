from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import (
    TaxonomyListCreateView, TaxonomyDeleteView, TagListCreateView, TagDeleteView, BlogPostViewSet,
    TestimonialCreateView, TestimonialListView, TestimonialDetailView, PublicTestimonialListView,
    SiteMetaView, PolicyView, ContactDetailsView,
)

router = SimpleRouter()
router.register(r'blogs', BlogPostViewSet, basename='blogs')

urlpatterns = [
    path('categories/', TaxonomyListCreateView.as_view(), name='blog-categories'),
    path('categories/<int:pk>/', TaxonomyDeleteView.as_view(), name='blog-category-delete'),
    path('tags/', TagListCreateView.as_view(), name='blog-tags'),
    path('tags/<int:pk>/', TagDeleteView.as_view(), name='blog-tag-delete'),

    path('testimonials/', PublicTestimonialListView.as_view(), name='testimonials'),
    path('admin/testimonials/', TestimonialCreateView.as_view(), name='admin-testimonial-create'),
    path('admin/testimonials/page/<int:page>/', TestimonialListView.as_view(), name='admin-testimonial-list'),
    path('admin/testimonials/<int:pk>/', TestimonialDetailView.as_view(), name='admin-testimonial-detail'),

    path('meta/', SiteMetaView.as_view(), name='site-meta'),
    path('policy/', PolicyView.as_view(), name='policy'),
    path('contact-details/', ContactDetailsView.as_view(), name='contact-details'),

    path('', include(router.urls)),
]
