from .chart import create_chart, encode_image, render_chart
from .errors import ChartError, DecodeFailure, EncodeFailure, FetchFailure, FontLoadFailure
from .models import ChartRequest, Entry, request_from_dict

__all__ = [
    "ChartError",
    "ChartRequest",
    "DecodeFailure",
    "EncodeFailure",
    "Entry",
    "FetchFailure",
    "FontLoadFailure",
    "create_chart",
    "encode_image",
    "render_chart",
    "request_from_dict",
]
