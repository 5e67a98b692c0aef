from rest_framework.routers import DefaultRouter

from apps.inventory.api.v1.views import IngredientLotViewSet


router = DefaultRouter()
router.register("ingredient-lots", IngredientLotViewSet, basename="ingredient-lot")

urlpatterns = router.urls
