from core.exceptions import NotFoundError

from .models import Property


def get_property(property_id, *, active_only: bool = True) -> Property:
    """Fetch a property or raise ``NotFoundError``; inactive listings count as missing by default."""
    queryset = Property.objects.all()
    if active_only:
        queryset = queryset.filter(is_active=True)
    try:
        return queryset.get(pk=property_id)
    except (Property.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Property") from None
