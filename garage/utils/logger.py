import os, logging, json
from logging import addLevelName
from logging.handlers import RotatingFileHandler
from flask import current_app, has_app_context, has_request_context, request
from typing import Optional, Any, Dict
from functools import wraps

"""
日志的使用方法

方式1：直接使用Flask应用日志记录器
current_app.logger.debug("Using app logger directly")

# 方式2：获取模块专属日志记录器 (推荐)
logger = get_logger(__name__)
logger.info(f"创建维修记录: vehicle={vehicle_id}")
logger.success("维修记录创建成功")
logger.error(f"维修记录创建失败: {str(e)}", exc_info=True)

日志输出效果
2024-05-01 16:20:12,345 - garage.repositories.maintenance - INFO - 创建维修记录: vehicle=1 (maintenance.py:42)
"""

# 首先定义SUCCESS级别 (介于WARNING和INFO之间)
SUCCESS_LEVEL_NUM = 25
logging.SUCCESS = SUCCESS_LEVEL_NUM  # 添加SUCCESS级别
addLevelName(SUCCESS_LEVEL_NUM, 'SUCCESS')  # 注册级别名称

# 修改Logger类添加success方法
def success(self, msg, *args, **kwargs):
    if self.isEnabledFor(SUCCESS_LEVEL_NUM):
        self._log(SUCCESS_LEVEL_NUM, msg, args, **kwargs)

logging.Logger.success = success

class ColorFormatter(logging.Formatter):
    """带颜色的控制台日志格式化器"""
    grey = "\x1b[38;20m"
    yellow = "\x1b[33;20m"
    green = "\x1b[32;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"
    format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d)"

    FORMATS = {
        logging.DEBUG: grey + format_str + reset,
        logging.INFO: grey + format_str + reset,
        logging.SUCCESS: green + format_str + reset,
        logging.WARNING: yellow + format_str + reset,
        logging.ERROR: red + format_str + reset,
        logging.CRITICAL: bold_red + format_str + reset
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno)
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)

def setup_app_logger(app=None, max_bytes: int = 10*1024*1024, backup_count: int = 3):
    """
    配置Flask应用日志记录器

    :param app: Flask应用实例
    :param max_bytes: 单个日志文件最大字节数
    :param backup_count: 保留的备份文件数
    """
    if app is None:
        app = current_app

    # 移除默认处理器
    app.logger.handlers.clear()

    # 文件处理器 (轮转日志)，测试环境下关闭
    if app.config.get('LOG_TO_FILE', True):
        full_log_dir = os.path.join(app.root_path, app.config.get('LOG_DIR', 'logs'))
        os.makedirs(full_log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=os.path.join(full_log_dir, 'garage.log'),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        app.logger.addHandler(file_handler)

    # 控制台处理器 (带颜色)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ColorFormatter())
    app.logger.addHandler(console_handler)

    app.logger.setLevel(logging.DEBUG if app.debug else logging.INFO)

    # 禁止传播到父记录器
    app.logger.propagate = False

    app.logger.info("Logger setup completed")

def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    获取一个配置好的日志记录器

    :param name: 记录器名称 (通常使用 __name__)
    :return: 配置好的Logger实例
    """
    if name is None:
        return current_app.logger if has_app_context() else logging.getLogger('garage')

    logger = logging.getLogger(name)

    # 如果已经配置过处理器或者不在应用上下文中则直接返回
    if logger.handlers or not has_app_context():
        return logger

    # 继承Flask应用的处理器配置
    for handler in current_app.logger.handlers:
        logger.addHandler(handler)

    logger.setLevel(current_app.logger.level)
    logger.propagate = False

    return logger

def _mask_sensitive_data(data: Any, sensitive_fields: tuple) -> Any:
    """脱敏敏感数据"""
    if isinstance(data, dict):
        return {k: '***MASKED***' if k in sensitive_fields else _mask_sensitive_data(v, sensitive_fields)
                for k, v in data.items()}
    elif isinstance(data, (list, tuple)):
        return [_mask_sensitive_data(item, sensitive_fields) for item in data]
    return data

def log_request(logger: logging.Logger, log_level: int, max_body_length: int, sensitive_fields: tuple) -> None:
    """记录请求信息"""
    request_info: Dict[str, Any] = {
        'method': request.method,
        'path': request.path,
        'args': _mask_sensitive_data(dict(request.args), sensitive_fields),
        'remote_addr': request.remote_addr,
    }

    # 处理请求体，上传文件只记录字段名
    if request.content_length:
        content_type = request.headers.get('Content-Type', '')
        if 'application/json' in content_type:
            request_info['json_body'] = _mask_sensitive_data(request.get_json(silent=True), sensitive_fields)
        elif 'form' in content_type:
            request_info['form_data'] = _mask_sensitive_data(dict(request.form), sensitive_fields)
            if request.files:
                request_info['files'] = list(request.files.keys())
        else:
            body_str = request.get_data(as_text=True)[:max_body_length]
            request_info['body'] = body_str + ('...' if request.content_length > max_body_length else '')

    logger.log(log_level, "Request received:\n%s",
               json.dumps(request_info, indent=2, ensure_ascii=False, default=str))

def log_response(logger: logging.Logger, log_level: int, response) -> None:
    """记录响应信息"""
    body, status = response if isinstance(response, tuple) else (response, getattr(response, 'status_code', 200))
    data = body.get_json(silent=True) if hasattr(body, 'get_json') else None
    log_msg = {
        'http_status': status,
        'data_summary': (str(data)[:100] + '...') if data else None,
    }
    if isinstance(data, dict) and 'error' in data:
        log_msg['error'] = data['error']

    logger.log(log_level, "Response:\n%s", json.dumps(log_msg, indent=2, ensure_ascii=False))

def log_requests(logger: Optional[logging.Logger] = None,
                 log_level: int = logging.DEBUG,
                 max_body_length: int = 1000,
                 sensitive_fields: tuple = ('password', 'secret', 'token')):
    """
    装饰器，可以装饰视图函数自动记录请求和响应

    使用示例:
    @vehicle_bp.route('/<int:vehicle_id>')
    @log_requests()
    def get_vehicle(vehicle_id):
        return jsonify({...})
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            active_logger = logger or get_logger(f.__module__)

            if has_request_context():
                log_request(active_logger, log_level, max_body_length, sensitive_fields)

            response = f(*args, **kwargs)

            log_response(active_logger, log_level, response)
            return response
        return decorated_function
    return decorator
