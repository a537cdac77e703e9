import os, re, uuid
from datetime import datetime
from flask import current_app
from werkzeug.security import safe_join
from werkzeug.utils import secure_filename
from ..errors import ValidationError
from .logger import get_logger

"""
上传文件管理

文件保存在 <UPLOAD_FOLDER>/<kind>/ 下，数据库中只保存 /uploads/<kind>/<name> 形式的路径；
kind 取值: vehicles / manuals / videos / thumbnails
"""

URL_PREFIX = '/uploads/'

_YOUTUBE_PATTERNS = (
    re.compile(r'(?:youtube\.com/watch\?(?:.*&)?v=)([A-Za-z0-9_-]{11})'),
    re.compile(r'(?:youtu\.be/)([A-Za-z0-9_-]{11})'),
    re.compile(r'(?:youtube\.com/embed/)([A-Za-z0-9_-]{11})'),
    re.compile(r'(?:youtube\.com/v/)([A-Za-z0-9_-]{11})'),
)

def _extension(filename):
    return filename.rsplit('.', 1)[1].lower() if '.' in filename else ''

def _file_size(file):
    stream = file.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size

def upload_dir(kind):
    path = os.path.join(current_app.config['UPLOAD_FOLDER'], kind)
    os.makedirs(path, exist_ok=True)
    return path

def save_upload(file, kind):
    """
    校验并保存上传文件

    :param file: werkzeug FileStorage
    :param kind: 上传类别，决定大小上限、扩展名白名单和子目录
    :return: /uploads/<kind>/<name>
    """
    logger = get_logger(__name__)
    if file is None or not file.filename:
        raise ValidationError("File required")

    allowed = current_app.config['ALLOWED_EXTENSIONS'][kind]
    ext = _extension(file.filename)
    if ext not in allowed:
        raise ValidationError(f"Invalid file type, allowed: {', '.join(sorted(allowed))}")

    limit = current_app.config['UPLOAD_LIMITS'][kind]
    size = _file_size(file)
    if size > limit:
        raise ValidationError(f"File too large, max {limit // (1024 * 1024)}MB")

    stem = secure_filename(file.filename).rsplit('.', 1)[0] or kind
    name = f"{stem}-{datetime.now().strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:8]}.{ext}"
    file.save(os.path.join(upload_dir(kind), name))

    logger.info(f"已保存上传文件 {kind}/{name} ({size} bytes)")
    return f"{URL_PREFIX}{kind}/{name}"

def resolve_upload_path(rel_path):
    """将 /uploads/... 路径转换为磁盘路径，非上传路径或越界路径返回 None"""
    if not rel_path or not rel_path.startswith(URL_PREFIX):
        return None
    return safe_join(current_app.config['UPLOAD_FOLDER'], rel_path[len(URL_PREFIX):])

def remove_upload(rel_path):
    """删除上传文件，文件不存在时忽略；返回是否实际删除"""
    path = resolve_upload_path(rel_path)
    if path is None or not os.path.isfile(path):
        return False
    os.remove(path)
    get_logger(__name__).info(f"已删除上传文件 {rel_path}")
    return True

def extract_youtube_id(url):
    """从 watch?v= / youtu.be / embed / v 链接中提取视频ID"""
    if not url:
        return None
    for pattern in _YOUTUBE_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None

def youtube_embed_url(video_id):
    return f"https://www.youtube.com/embed/{video_id}"

def youtube_thumbnail(video_id):
    return f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"
