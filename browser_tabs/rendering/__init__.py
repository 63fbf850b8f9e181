# Image encode/decode for screenshots and icons
from .picture import PictureStore, encode_image, decode_image

__all__ = [
    'PictureStore',
    'encode_image',
    'decode_image',
]
