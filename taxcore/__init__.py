"""Line-graph tax form computation: brackets, limitations and field output."""

__version__ = "0.1.0"
