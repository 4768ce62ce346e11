# posledger/products/routes.py
from ..model import CATALOG
from ..utils.api import ok
from . import bp


@bp.get("")
def list_products():
    return ok([p.as_api() for p in CATALOG])
