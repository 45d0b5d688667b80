"""
Controllers connecting the annotation engine to the UI.
"""
from .annotation_controller import ALL_PAGES, AnnotationController
from .input_handler import UserInputHandler
from .view_controller import ViewController, ViewMode, tile_zoom

__all__ = [
    'AnnotationController', 'ALL_PAGES', 'UserInputHandler',
    'ViewController', 'ViewMode', 'tile_zoom',
]
