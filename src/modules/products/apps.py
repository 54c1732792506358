from django.apps import AppConfig


class ProductsConfig(AppConfig):
    """Catalog rows read by checkout to reprice carts."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.products"
    label = "products"
    verbose_name = "Jewelry catalog"
