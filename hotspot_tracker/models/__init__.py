from hotspot_tracker.models.scan import ScanRequest, ScanResponse, ScanStats

__all__ = ["ScanRequest", "ScanResponse", "ScanStats"]
