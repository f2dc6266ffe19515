import shutil
import tempfile

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from apps.utils.exceptions import BusinessLogicException
from .models import BlogCategory, BlogTag, BlogPost, BlogStatus, Testimonial, SiteMeta, ContactDetails
from .services import BlogService, TaxonomyService, parse_name_list, unique_slug

User = get_user_model()


class ParseNameListTests(TestCase):

    def test_formats(self):
        self.assertEqual(parse_name_list('["Cultivation", "Harvest"]'), ["Cultivation", "Harvest"])
        self.assertEqual(parse_name_list("['Cultivation','Harvest']"), ["Cultivation", "Harvest"])
        self.assertEqual(parse_name_list("[Cultivation, Harvest]"), ["Cultivation", "Harvest"])
        self.assertEqual(parse_name_list("Cultivation,Harvest"), ["Cultivation", "Harvest"])
        self.assertEqual(parse_name_list("Cultivation"), ["Cultivation"])

    def test_lists(self):
        self.assertEqual(parse_name_list(["Cultivation", " Harvest "]), ["Cultivation", "Harvest"])
        # a single form value that itself holds a list
        self.assertEqual(parse_name_list(['["Cultivation","Harvest"]']), ["Cultivation", "Harvest"])

    def test_empty(self):
        self.assertEqual(parse_name_list(None), [])
        self.assertEqual(parse_name_list(""), [])
        self.assertEqual(parse_name_list("[]"), [])


class BlogServiceTests(TestCase):

    def setUp(self):
        TaxonomyService.create(BlogCategory, "Cultivation")
        TaxonomyService.create(BlogTag, "Monsoon")

    def test_slugs_are_unique(self):
        first = BlogService.create({"title": "Growing Pepper", "content": "..."})
        second = BlogService.create({"title": "Growing Pepper", "content": "..."})
        self.assertEqual(first.slug, "growing-pepper")
        self.assertEqual(second.slug, "growing-pepper-2")
        self.assertEqual(unique_slug(BlogPost, "Growing Pepper", exclude_pk=first.pk), "growing-pepper")

    def test_publish_stamps_date(self):
        draft = BlogService.create({"title": "Draft", "content": "..."})
        self.assertIsNone(draft.published_at)

        post = BlogService.update(draft.pk, {"status": BlogStatus.PUBLISHED})
        self.assertIsNotNone(post.published_at)

    def test_unknown_category(self):
        with self.assertRaises(BusinessLogicException) as ctx:
            BlogService.create({"title": "Post", "content": "..."}, categories="Gardening")
        self.assertEqual(ctx.exception.message, "Unknown category: Gardening")
        self.assertFalse(BlogPost.objects.exists())

    def test_taxonomy_duplicate(self):
        with self.assertRaises(BusinessLogicException) as ctx:
            TaxonomyService.create(BlogCategory, "cultivation")
        self.assertEqual(ctx.exception.message, "Category already exists")


class BlogApiTests(APITestCase):

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)
        self.admin = User.objects.create_admin(email="admin@example.com", password="Pepper@123")
        TaxonomyService.create(BlogCategory, "Cultivation")
        TaxonomyService.create(BlogCategory, "Harvest")
        TaxonomyService.create(BlogTag, "Monsoon")

    def test_create_multipart(self):
        self.client.force_authenticate(user=self.admin)
        thumbnail = SimpleUploadedFile("vine.png", b"\x89PNG fake", content_type="image/png")

        with override_settings(MEDIA_ROOT=self.media_root):
            response = self.client.post("/api/v1/content/blogs/", {
                "title": "Pepper in the Monsoon",
                "content": "<p>Keep the basins clear.</p>",
                "status": "PUBLISHED",
                "category": '["Cultivation", "Harvest"]',
                "tags": "Monsoon",
                "thumbnail": thumbnail,
            }, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        post = BlogPost.objects.get()
        self.assertEqual(sorted(post.categories.values_list("name", flat=True)), ["Cultivation", "Harvest"])
        self.assertEqual(list(post.tags.values_list("name", flat=True)), ["Monsoon"])
        self.assertTrue(post.thumbnail.name.startswith("blog/thumbnails/"))

    def test_public_sees_published_only(self):
        BlogService.create({"title": "Live", "content": "...", "status": BlogStatus.PUBLISHED}, categories="Cultivation")
        draft = BlogService.create({"title": "Hidden", "content": "..."})

        response = self.client.get("/api/v1/content/blogs/")
        self.assertEqual([b["title"] for b in response.data["blogs"]], ["Live"])

        response = self.client.get(f"/api/v1/content/blogs/{draft.pk}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"], "Blog not found")

        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/content/blogs/")
        self.assertEqual(len(response.data["blogs"]), 2)

    def test_filter_and_slug_lookup(self):
        BlogService.create({"title": "Live", "content": "...", "status": BlogStatus.PUBLISHED}, categories="Cultivation")
        BlogService.create({"title": "Other", "content": "...", "status": BlogStatus.PUBLISHED}, categories="Harvest")

        response = self.client.get("/api/v1/content/blogs/", {"category": "harvest"})
        self.assertEqual([b["title"] for b in response.data["blogs"]], ["Other"])

        response = self.client.get("/api/v1/content/blogs/live/")
        self.assertEqual(response.data["blog"]["title"], "Live")

    def test_numeric_slug_lookup(self):
        post = BlogService.create({"title": "Live", "content": "...", "status": BlogStatus.PUBLISHED})
        BlogService.create({"title": "2024", "content": "...", "status": BlogStatus.PUBLISHED})

        response = self.client.get("/api/v1/content/blogs/2024/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["blog"]["title"], "2024")

        response = self.client.get(f"/api/v1/content/blogs/{post.pk}/")
        self.assertEqual(response.data["blog"]["title"], "Live")

    def test_update_and_delete(self):
        post = BlogService.create({"title": "Old", "content": "..."}, categories="Cultivation")
        self.client.force_authenticate(user=self.admin)

        response = self.client.put(f"/api/v1/content/blogs/{post.pk}/", {"title": "New", "category": ["Harvest"]}, format="json")
        self.assertEqual(response.data["message"], "Blog updated successfully")
        post.refresh_from_db()
        self.assertEqual(post.slug, "new")
        self.assertEqual(list(post.categories.values_list("name", flat=True)), ["Harvest"])

        response = self.client.delete(f"/api/v1/content/blogs/{post.pk}/")
        self.assertEqual(response.data["message"], "Blog deleted successfully")
        self.assertFalse(BlogPost.objects.exists())

    def test_write_requires_admin(self):
        response = self.client.post("/api/v1/content/blogs/", {"title": "x", "content": "y"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_categories_endpoints(self):
        response = self.client.get("/api/v1/content/categories/")
        self.assertEqual([c["name"] for c in response.data["categories"]], ["Cultivation", "Harvest"])

        self.client.force_authenticate(user=self.admin)
        response = self.client.post("/api/v1/content/tags/", {"name": "Organic"}, format="json")
        self.assertEqual(response.data["message"], "Tag created successfully")

        tag = BlogTag.objects.get(name="Organic")
        response = self.client.delete(f"/api/v1/content/tags/{tag.pk}/")
        self.assertEqual(response.data["message"], "Tag deleted successfully")
        response = self.client.delete(f"/api/v1/content/tags/{tag.pk}/")
        self.assertEqual(response.data["error"], "No tag with the id")


class TestimonialApiTests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_admin(email="admin@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.admin)
        self.payload = {"name": "Joseph", "place": "Wayanad", "rating": 5, "message": "Healthy vines."}

    def test_crud(self):
        response = self.client.post("/api/v1/content/admin/testimonials/", self.payload, format="json")
        self.assertEqual(response.data["message"], "New testimonial added successfully!")
        pk = response.data["result"]["id"]

        response = self.client.put(f"/api/v1/content/admin/testimonials/{pk}/", {"active": False}, format="json")
        self.assertFalse(response.data["testimonial"]["active"])

        response = self.client.delete(f"/api/v1/content/admin/testimonials/{pk}/")
        self.assertEqual(response.data, {"success": True, "message": "Testimonial removed successfully!"})

        response = self.client.get(f"/api/v1/content/admin/testimonials/{pk}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_rating_range(self):
        response = self.client.post("/api/v1/content/admin/testimonials/", {**self.payload, "rating": 6}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_public_and_paged_lists(self):
        Testimonial.objects.create(**self.payload)
        Testimonial.objects.create(**{**self.payload, "name": "Hidden"}, active=False)

        response = self.client.get("/api/v1/content/admin/testimonials/page/1/")
        self.assertEqual(response.data["testimonials"]["total_count"], 2)

        self.client.force_authenticate(user=None)
        response = self.client.get("/api/v1/content/testimonials/")
        self.assertEqual([t["name"] for t in response.data["testimonials"]], ["Joseph"])


class SiteContentApiTests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_admin(email="admin@example.com", password="Pepper@123")

    def test_meta_upsert_from_form_text(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post("/api/v1/content/meta/", {
            "option": "home",
            "value": '{"title": "Kumbukkal Pepper", "description": "Line one\\nLine two"}',
        }, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.post("/api/v1/content/meta/", {
            "option": "home", "value": {"title": "Updated", "description": "Fresh"},
        }, format="json")
        self.assertEqual(SiteMeta.objects.count(), 1)
        self.assertEqual(SiteMeta.objects.get().title, "Updated")

        self.client.force_authenticate(user=None)
        response = self.client.get("/api/v1/content/meta/", {"option": "home"})
        self.assertEqual(response.data["meta"]["title"], "Updated")

    def test_meta_rejects_unknown_option(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post("/api/v1/content/meta/", {
            "option": "blog", "value": {"title": "x", "description": "y"},
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("option", response.data)

    def test_policy(self):
        self.client.force_authenticate(user=self.admin)
        self.client.put("/api/v1/content/policy/", {"terms": "Be kind to vines."}, format="json")
        self.client.put("/api/v1/content/policy/", {"privacy_policy": "We keep nothing."}, format="json")

        response = self.client.get("/api/v1/content/policy/")
        self.assertEqual(response.data["policy"]["terms"], "Be kind to vines.")
        self.assertEqual(response.data["policy"]["privacy_policy"], "We keep nothing.")

    def test_contact_details(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.put("/api/v1/content/contact-details/", {"field": "phone", "value": "+91 9000000000"}, format="json")
        self.assertEqual(response.data["details"]["phone"], "+91 9000000000")
        self.assertEqual(ContactDetails.objects.count(), 1)

        response = self.client.put("/api/v1/content/contact-details/", {"field": "fax", "value": "1"}, format="json")
        self.assertEqual(response.data["error"], "Invalid field name")

        response = self.client.put("/api/v1/content/contact-details/", {"field": "email", "value": "not-an-email"}, format="json")
        self.assertEqual(response.data["error"], "Enter a valid email address")
