from .base import BaseModel
from .comparison import compare_values
from .comparison import json_equal
from .comparison import values_equal
from .diff import diff
from .evaluator import VALUE_PATH
from .evaluator import evaluate
from .exceptions import AmbiguousPathException
from .exceptions import InvalidFilterException
from .exceptions import InvalidPathException
from .exceptions import InvalidSyntaxException
from .exceptions import InvalidValueException
from .exceptions import NoTargetException
from .exceptions import SCIMException
from .filters import AndFilter
from .filters import ComparisonFilter
from .filters import ComplexValueFilter
from .filters import ContainsFilter
from .filters import EndsWithFilter
from .filters import EqualFilter
from .filters import Filter
from .filters import FilterType
from .filters import GreaterThanFilter
from .filters import GreaterThanOrEqualFilter
from .filters import LessThanFilter
from .filters import LessThanOrEqualFilter
from .filters import NotEqualFilter
from .filters import NotFilter
from .filters import OrFilter
from .filters import PresentFilter
from .filters import StartsWithFilter
from .messages.error import Error
from .messages.list_response import ListResponse
from .messages.message import Message
from .messages.patch_op import PatchOp
from .messages.patch_op import PatchOperation
from .messages.search_request import SearchRequest
from .nodes import add_value
from .nodes import get_value
from .nodes import get_values
from .nodes import path_exists
from .nodes import remove_values
from .nodes import replace_value
from .parser import ParserOptions
from .parser import parse_filter
from .parser import parse_path
from .path import EXTERNAL_ID
from .path import ID
from .path import META
from .path import SCHEMAS
from .path import Element
from .path import Path
from .projection import exclude_attributes
from .projection import include_attributes
from .search import search
from .sort import ResourceComparator
from .sort import SortOrder
from .sort import sort_resources
from .urn import URN

__all__ = [
    "AmbiguousPathException",
    "AndFilter",
    "BaseModel",
    "ComparisonFilter",
    "ComplexValueFilter",
    "ContainsFilter",
    "EXTERNAL_ID",
    "Element",
    "EndsWithFilter",
    "EqualFilter",
    "Error",
    "Filter",
    "FilterType",
    "GreaterThanFilter",
    "GreaterThanOrEqualFilter",
    "ID",
    "InvalidFilterException",
    "InvalidPathException",
    "InvalidSyntaxException",
    "InvalidValueException",
    "LessThanFilter",
    "LessThanOrEqualFilter",
    "ListResponse",
    "META",
    "Message",
    "NoTargetException",
    "NotEqualFilter",
    "NotFilter",
    "OrFilter",
    "ParserOptions",
    "PatchOp",
    "PatchOperation",
    "Path",
    "PresentFilter",
    "ResourceComparator",
    "SCHEMAS",
    "SCIMException",
    "SearchRequest",
    "SortOrder",
    "StartsWithFilter",
    "URN",
    "VALUE_PATH",
    "add_value",
    "compare_values",
    "diff",
    "evaluate",
    "exclude_attributes",
    "get_value",
    "get_values",
    "include_attributes",
    "json_equal",
    "parse_filter",
    "parse_path",
    "path_exists",
    "remove_values",
    "replace_value",
    "search",
    "sort_resources",
    "values_equal",
]
