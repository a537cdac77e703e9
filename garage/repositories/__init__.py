from .vehicle import VehicleRepository
from .manual import ManualRepository
from .video import VideoRepository
from .maintenance import MaintenanceRepository, QUICK_ADD_TEMPLATES
from .patch import UNSET, VehiclePatch, VideoPatch, MaintenanceLogPatch

__all__ = ['VehicleRepository', 'ManualRepository', 'VideoRepository', 'MaintenanceRepository',
           'QUICK_ADD_TEMPLATES', 'UNSET', 'VehiclePatch', 'VideoPatch', 'MaintenanceLogPatch']
