from .tensor import image_size, to_input_tensor, to_nchw

__all__ = ["image_size", "to_input_tensor", "to_nchw"]
