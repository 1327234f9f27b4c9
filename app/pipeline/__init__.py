"""
Multi-step writes that must land atomically.
"""
from app.pipeline.upload import handle_new_receipt_upload, replace_receipt, save_items

__all__ = ["handle_new_receipt_upload", "replace_receipt", "save_items"]
