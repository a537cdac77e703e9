# 配置文件
import os
from dotenv import load_dotenv

load_dotenv() # 加载.env文件中的环境变量

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    """基础配置"""
    SECRET_KEY = os.getenv("SECRET_KEY", "development")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///garage.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    DEBUG = os.getenv("DEBUG", "False") == "True"
    TESTING = os.getenv("TESTING", "False") == "True"
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_TO_FILE = True
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

    # 上传配置
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(BASE_DIR, "uploads"))
    MAX_CONTENT_LENGTH = 500 * 1024 * 1024  # 单个请求上限与最大视频一致
    UPLOAD_LIMITS = {
        'vehicles': 5 * 1024 * 1024,     # 5MB
        'manuals': 50 * 1024 * 1024,     # 50MB
        'videos': 500 * 1024 * 1024,     # 500MB
        'thumbnails': 2 * 1024 * 1024,   # 2MB
    }
    ALLOWED_EXTENSIONS = {
        'vehicles': {'jpg', 'jpeg', 'png', 'gif', 'webp'},
        'manuals': {'pdf'},
        'videos': {'mp4', 'avi', 'mov', 'wmv', 'flv', 'mkv', 'webm'},
        'thumbnails': {'jpg', 'jpeg', 'png', 'gif', 'webp'},
    }

    # 机油更换提醒阈值
    OIL_CHANGE_SOON_MILES = 500
    OIL_CHANGE_SOON_DAYS = 30

class DevelopmentConfig(Config):
    """开发环境配置"""
    ENV = "development"
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URL", "sqlite:///dev.db")

class TestingConfig(Config):
    """测试环境配置"""
    ENV = "testing"
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ECHO = False  # 测试时关闭SQL日志
    LOG_TO_FILE = False

class ProductionConfig(Config):
    """生产环境配置"""
    ENV = "production"
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("PROD_DATABASE_URL", "sqlite:///prod.db")
