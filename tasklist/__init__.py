"""Task-list engine: shopping items, assigned to-dos and personal notes per tenant location."""

__version__ = "0.1.0"
