from .main import main_bp as main_blueprint, uploads_bp as uploads_blueprint
from .vehicle_api import vehicle_bp as vehicle_blueprint
from .maintenance_api import maintenance_bp as maintenance_blueprint
from .manual_api import manual_bp as manual_blueprint
from .video_api import video_bp as video_blueprint

def register_blueprints(app):
    """注册所有蓝图"""
    app.register_blueprint(main_blueprint, url_prefix='/api')
    app.register_blueprint(vehicle_blueprint, url_prefix='/api/vehicles')
    app.register_blueprint(maintenance_blueprint, url_prefix='/api/maintenance')
    app.register_blueprint(manual_blueprint, url_prefix='/api/manuals')
    app.register_blueprint(video_blueprint, url_prefix='/api/videos')
    app.register_blueprint(uploads_blueprint)
