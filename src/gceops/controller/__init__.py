"""Controller exports for gceops."""

from __future__ import annotations

from .compute_controller import ComputeController

__all__ = ["ComputeController"]
