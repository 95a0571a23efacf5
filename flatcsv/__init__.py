from .binarizer import BinaryGrid, binarize
from .errors import ExportIOError, FlatCsvError, InputDecodeError, IntrospectionError
from .exporter import Exporter, export_binary, export_csv
from .grid import Grid
from .mapper import Mapper
from .models import ExportOptions
from .policy import (
    AnnotationPolicy,
    Exportable,
    FieldDescriptor,
    FieldPolicyProvider,
    NonExportable,
    exportable,
    non_exportable,
    non_exportable_field,
)
from .primitives import Kind, classify

__version__ = "0.1.0"
