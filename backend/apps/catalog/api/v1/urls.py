from rest_framework.routers import DefaultRouter

from apps.catalog.api.v1.views import IngredientViewSet, RecipeViewSet, SupplierViewSet


router = DefaultRouter()
router.register("suppliers", SupplierViewSet, basename="supplier")
router.register("ingredients", IngredientViewSet, basename="ingredient")
router.register("recipes", RecipeViewSet, basename="recipe")

urlpatterns = router.urls
