from officeql.types.base import OfficeQLBaseModel

__all__ = [
    "OfficeQLBaseModel",
]
