"""Loader utilities for models and animation clips."""

from .gltf_loader import GltfLoader, GltfLoadError, LoadedModel, model_stem, sanitize_node_name

__all__ = ['GltfLoader', 'GltfLoadError', 'LoadedModel', 'model_stem', 'sanitize_node_name']
