from rest_framework import generics, status, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import IsNurseryAdmin
from apps.utils.pagination import AdminListMixin
from .models import BlogCategory, BlogTag
from .serializers import (
    BlogCategorySerializer, BlogTagSerializer, TaxonomyInputSerializer,
    BlogPostSerializer, BlogPostInputSerializer, TestimonialSerializer,
    MetaUpdateSerializer, SiteMetaSerializer, PolicySerializer,
    ContactDetailsSerializer, ContactFieldSerializer,
)
from .services import (
    TaxonomyService, BlogService, TestimonialService, SiteMetaService, PolicyService,
    ContactDetailsService,
)


def _list_param(data, key):
    """
    QueryDict keeps repeated form keys; plain JSON bodies don't.
    """
    if hasattr(data, 'getlist'):
        values = data.getlist(key)
        return values if len(values) > 1 else data.get(key)
    return data.get(key)


def _is_admin(request):
    return bool(request.user and request.user.is_authenticated and request.user.is_staff)


# ---------------------------------------------------------------------------
# Blog taxonomy
# ---------------------------------------------------------------------------

class TaxonomyListCreateView(APIView):
    model = BlogCategory
    serializer_class = BlogCategorySerializer
    label = "Category"
    key = "categories"

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsNurseryAdmin()]

    def get(self, request):
        qs = TaxonomyService.list_all(self.model)
        return Response({
            "message": f"Showing all the {self.key}",
            self.key: self.serializer_class(qs, many=True).data,
        })

    def post(self, request):
        serializer = TaxonomyInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        obj = TaxonomyService.create(self.model, serializer.validated_data['name'])
        return Response(
            {"message": f"{self.label} created successfully", "data": self.serializer_class(obj).data},
            status=status.HTTP_201_CREATED,
        )


class TaxonomyDeleteView(APIView):
    permission_classes = [IsNurseryAdmin]
    model = BlogCategory
    label = "Category"

    def delete(self, request, pk):
        TaxonomyService.delete(self.model, pk)
        return Response({"message": f"{self.label} deleted successfully"})


class TagListCreateView(TaxonomyListCreateView):
    model = BlogTag
    serializer_class = BlogTagSerializer
    label = "Tag"
    key = "tags"


class TagDeleteView(TaxonomyDeleteView):
    model = BlogTag
    label = "Tag"


# ---------------------------------------------------------------------------
# Blog posts
# ---------------------------------------------------------------------------

class BlogPostViewSet(viewsets.ViewSet):
    """
    Public readers see published posts; admins see drafts too and can write.
    """
    lookup_value_regex = '[^/]+'

    def get_permissions(self):
        if self.action in ('list', 'retrieve'):
            return [AllowAny()]
        return [IsNurseryAdmin()]

    def list(self, request):
        params = request.query_params
        qs = BlogService.list_posts(
            search=params.get('search'),
            categories=params.get('category'),
            tags=params.get('tags'),
            published_only=not _is_admin(request),
        )
        return Response({
            "message": "Showing all the blogs",
            "blogs": BlogPostSerializer(qs, many=True, context={'request': request}).data,
        })

    def retrieve(self, request, pk=None):
        post = BlogService.get(pk, published_only=not _is_admin(request))
        return Response({"blog": BlogPostSerializer(post, context={'request': request}).data})

    def create(self, request):
        serializer = BlogPostInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        post = BlogService.create(
            serializer.validated_data,
            categories=_list_param(request.data, 'category'),
            tags=_list_param(request.data, 'tags'),
        )
        return Response(
            {"message": "Blog created successfully", "blog": BlogPostSerializer(post, context={'request': request}).data},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None):
        serializer = BlogPostInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        post = BlogService.update(
            pk,
            serializer.validated_data,
            categories=_list_param(request.data, 'category') if 'category' in request.data else None,
            tags=_list_param(request.data, 'tags') if 'tags' in request.data else None,
        )
        return Response({
            "message": "Blog updated successfully",
            "blog": BlogPostSerializer(post, context={'request': request}).data,
        })

    def destroy(self, request, pk=None):
        BlogService.delete(pk)
        return Response({"message": "Blog deleted successfully"})


# ---------------------------------------------------------------------------
# Testimonials
# ---------------------------------------------------------------------------

class TestimonialCreateView(APIView):
    permission_classes = [IsNurseryAdmin]

    def post(self, request):
        serializer = TestimonialSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        testimonial = TestimonialService.create(serializer.validated_data)
        return Response(
            {"message": "New testimonial added successfully!", "result": TestimonialSerializer(testimonial).data},
            status=status.HTTP_201_CREATED,
        )


class TestimonialListView(AdminListMixin, generics.GenericAPIView):
    permission_classes = [IsNurseryAdmin]
    serializer_class = TestimonialSerializer
    filter_backends = []
    list_message = "Showing all the testimonials"
    envelope_key = results_key = "testimonials"

    def get_queryset(self):
        return TestimonialService.list_all()


class TestimonialDetailView(APIView):
    permission_classes = [IsNurseryAdmin]

    def get(self, request, pk):
        return Response({"testimonial": TestimonialSerializer(TestimonialService.get(pk)).data})

    def put(self, request, pk):
        serializer = TestimonialSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        testimonial = TestimonialService.update(pk, serializer.validated_data)
        return Response({
            "message": "Testimonial updated successfully",
            "testimonial": TestimonialSerializer(testimonial).data,
        })

    def delete(self, request, pk):
        TestimonialService.delete(pk)
        return Response({"success": True, "message": "Testimonial removed successfully!"})


class PublicTestimonialListView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({
            "message": "Showing all the testimonials",
            "testimonials": TestimonialSerializer(TestimonialService.list_active(), many=True).data,
        })


# ---------------------------------------------------------------------------
# Site meta, policy, contact details
# ---------------------------------------------------------------------------

class SiteMetaView(APIView):

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsNurseryAdmin()]

    def get(self, request):
        option = request.query_params.get('option')
        if option:
            meta = SiteMetaService.get_meta(option)
            data = SiteMetaSerializer(meta, context={'request': request}).data if meta else None
        else:
            data = SiteMetaSerializer(SiteMetaService.get_meta(), many=True, context={'request': request}).data
        return Response({"message": "Showing the meta data", "meta": data})

    def post(self, request):
        serializer = MetaUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        meta = SiteMetaService.upsert(data['option'], data['value'], data.get('image'))
        return Response({
            "message": f"Meta data for {meta.option} updated successfully",
            "meta": SiteMetaSerializer(meta, context={'request': request}).data,
        })


class PolicyView(APIView):

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsNurseryAdmin()]

    def get(self, request):
        return Response({"message": "Showing the policy", "policy": PolicySerializer(PolicyService.get()).data})

    def put(self, request):
        serializer = PolicySerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        policy = PolicyService.update(serializer.validated_data)
        return Response({"message": "Policy updated successfully", "policy": PolicySerializer(policy).data})


class ContactDetailsView(APIView):

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsNurseryAdmin()]

    def get(self, request):
        details = ContactDetailsService.get_details()
        return Response({"message": "Showing the contact details", "details": ContactDetailsSerializer(details).data})

    def put(self, request):
        serializer = ContactFieldSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        details = ContactDetailsService.upsert_field(**serializer.validated_data)
        return Response({
            "message": "Contact details updated successfully",
            "details": ContactDetailsSerializer(details).data,
        })
