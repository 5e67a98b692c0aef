from rest_framework.routers import DefaultRouter

from apps.production.api.v1.views import PalletViewSet, ProductionRunViewSet


router = DefaultRouter()
router.register("production-runs", ProductionRunViewSet, basename="production-run")
router.register("pallets", PalletViewSet, basename="pallet")

urlpatterns = router.urls
