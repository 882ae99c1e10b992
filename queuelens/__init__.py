"""QueueLens: motor de analytics de colas."""

__version__ = "1.0.0"
