from tensorscape.scene.builder import CellDrawable, GhostDrawable, Scene, SceneBuilder
from tensorscape.scene.highlight import HighlightController
from tensorscape.scene.picking import PickHit, PickingService, Ray, cast_ray, pointer_to_ndc

__all__ = [
    "CellDrawable",
    "GhostDrawable",
    "HighlightController",
    "PickHit",
    "PickingService",
    "Ray",
    "Scene",
    "SceneBuilder",
    "cast_ray",
    "pointer_to_ndc",
]
