# posledger/shared/services/marketplace_notifier.py
import logging
from typing import Callable, Iterable, List, Mapping, Optional

import requests
from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError

from posledger.config.settings import settings

logger = logging.getLogger(__name__)


class MarketplaceNotifier:
    """
    Notifica a Mercado Libre el nuevo stock de un producto.
    Es best-effort: nunca bloquea ni revierte una operación local.
    """

    def notify_stock(self, product_id: str, new_stock: int) -> None:
        raise NotImplementedError


class NullMarketplaceNotifier(MarketplaceNotifier):
    """Integración deshabilitada"""

    def notify_stock(self, product_id: str, new_stock: int) -> None:
        logger.debug(f"Sin integración de marketplace: producto {product_id} stock {new_stock}")


class HttpMarketplaceNotifier(MarketplaceNotifier):
    """Envía el stock al servicio de sincronización de publicaciones"""

    def __init__(self, url: str, timeout: float = 5.0):
        self.url = url
        self.timeout = timeout

    def notify_stock(self, product_id: str, new_stock: int) -> None:
        response = requests.post(
            self.url,
            json={"product_id": product_id, "stock": new_stock},
            timeout=self.timeout
        )
        response.raise_for_status()
        logger.info(f"📤 Stock sincronizado: producto {product_id} → {new_stock}")


class BackgroundMarketplaceNotifier(MarketplaceNotifier):
    """Difiere cada notificación a las BackgroundTasks del request"""

    def __init__(self, background_tasks: BackgroundTasks, inner: MarketplaceNotifier):
        self.background_tasks = background_tasks
        self.inner = inner

    def notify_stock(self, product_id: str, new_stock: int) -> None:
        self.background_tasks.add_task(_safe_notify, self.inner, product_id, new_stock)


def _safe_notify(notifier: MarketplaceNotifier, product_id: str, new_stock: int) -> None:
    try:
        notifier.notify_stock(product_id, new_stock)
    except Exception as e:
        logger.warning(f"⚠️ No se pudo notificar stock de {product_id} al marketplace: {e}")


def publish_stock_changes(
    notifier: Optional[MarketplaceNotifier],
    product_ids: Iterable[str],
    read_stocks: Callable[[List[str]], Mapping[str, int]]
) -> None:
    """
    Llamar sólo después del commit. Ni la lectura del stock nuevo ni el
    notificador pueden cambiar el resultado de la operación local.
    """
    product_ids = sorted(set(product_ids))
    if notifier is None or not product_ids:
        return

    try:
        stocks = read_stocks(product_ids)
    except SQLAlchemyError as e:
        logger.warning(f"⚠️ No se pudo leer el stock para notificar al marketplace: {e}")
        return

    for product_id, stock in stocks.items():
        _safe_notify(notifier, product_id, stock)


def build_notifier(url: Optional[str] = None) -> MarketplaceNotifier:
    url = url if url is not None else settings.marketplace_notify_url
    if not url:
        return NullMarketplaceNotifier()
    return HttpMarketplaceNotifier(url, timeout=settings.marketplace_notify_timeout)


def get_marketplace_notifier(background_tasks: BackgroundTasks) -> MarketplaceNotifier:
    """Dependencia FastAPI: las notificaciones salen después de enviar la respuesta"""
    return BackgroundMarketplaceNotifier(background_tasks, build_notifier())
