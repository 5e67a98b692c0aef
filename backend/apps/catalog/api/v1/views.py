from rest_framework import mixins, viewsets

from apps.catalog.api.v1.serializers import IngredientSerializer, RecipeSerializer, SupplierSerializer
from apps.catalog.models import Ingredient, Recipe, Supplier


class SupplierViewSet(viewsets.ModelViewSet):
    queryset = Supplier.objects.all()
    serializer_class = SupplierSerializer


class IngredientViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = IngredientSerializer

    def get_queryset(self):
        queryset = Ingredient.objects.select_related("supplier").order_by("name")
        active_only = self.request.query_params.get("active")
        if active_only in {"1", "true", "True"}:
            queryset = queryset.filter(is_active=True)
        query = (self.request.query_params.get("q") or "").strip()
        if query:
            queryset = queryset.filter(name__icontains=query)
        return queryset


class RecipeViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Recipe.objects.all()
    serializer_class = RecipeSerializer
