# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

from typing import TYPE_CHECKING

__all__ = ["app", "create_app"]

if TYPE_CHECKING:  # pragma: no cover
    from .app import app, create_app


def __getattr__(name: str):  # pragma: no cover - defers FastAPI import until the app is needed
    if name in __all__:
        from . import app as app_module

        return getattr(app_module, name)
    raise AttributeError(name)
