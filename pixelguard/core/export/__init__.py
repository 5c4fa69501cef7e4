"""
Burn-in export of annotated documents.
"""
from .burn_in import BurnInExporter, group_by_page
from .export_worker import ExportWorker

__all__ = ['BurnInExporter', 'group_by_page', 'ExportWorker']
