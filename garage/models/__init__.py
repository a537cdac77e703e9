from .vehicle import Vehicle, VehicleType
from .manual import Manual
from .video import Video, VideoType
from .maintenance import MaintenanceLog, MaintenanceTag, DEFAULT_TAGS
from .association import maintenance_log_tags

__all__ = ['Vehicle', 'VehicleType', 'Manual', 'Video', 'VideoType',
           'MaintenanceLog', 'MaintenanceTag', 'DEFAULT_TAGS', 'maintenance_log_tags']
