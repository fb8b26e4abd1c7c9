"""
Per-application dependency container.

create_app() builds the storage handles, stores, token issuer and workflows
once and keeps them in app.extensions; views reach them through
get_services().
"""
from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from models.brand import Brand
from models.category import Category
from models.db_storage import DBStorage
from services.auth import AuthService
from services.catalog import NameResolver
from services.object_storage import ObjectStorage, S3ObjectStorage
from services.products import ProductService
from services.stores import SQLSessionStore, SQLUserStore
from utils.security import TokenIssuer

EXTENSION_KEY = "storefront"


@dataclass
class Services:
    storage: DBStorage
    object_storage: ObjectStorage
    tokens: TokenIssuer
    auth: AuthService
    products: ProductService
    category_names: NameResolver
    brand_names: NameResolver


def _object_storage_from_config(config) -> ObjectStorage:
    return S3ObjectStorage(
        bucket=config["S3_BUCKET"],
        region=config["S3_REGION"],
        endpoint_url=config.get("S3_ENDPOINT_URL"),
        public_base_url=config.get("S3_PUBLIC_BASE_URL"),
        timeout=config["STORAGE_TIMEOUT_SECONDS"],
    )


def init_services(app: Flask, storage: DBStorage | None = None,
                  object_storage: ObjectStorage | None = None) -> Services:
    config = app.config
    if storage is None:
        storage = DBStorage(config["DATABASE_URL"], echo=config.get("SQL_ECHO", False))
        storage.reload()
    if object_storage is None:
        object_storage = _object_storage_from_config(config)

    tokens = TokenIssuer(
        secret=config["JWT_SECRET"],
        algorithm=config["JWT_ALGORITHM"],
        issuer=config["JWT_ISSUER"],
        access_ttl=config["ACCESS_TOKEN_EXPIRES"],
    )
    services = Services(
        storage=storage,
        object_storage=object_storage,
        tokens=tokens,
        auth=AuthService(
            users=SQLUserStore(storage),
            sessions=SQLSessionStore(storage),
            tokens=tokens,
            access_ttl=config["ACCESS_TOKEN_EXPIRES"],
            refresh_ttl=config["REFRESH_TOKEN_EXPIRES"],
        ),
        products=ProductService(storage, object_storage, image_folder=config["PRODUCT_IMAGE_FOLDER"]),
        category_names=NameResolver(storage, Category),
        brand_names=NameResolver(storage, Brand),
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
