from flask import Blueprint, current_app, jsonify, send_from_directory
from datetime import datetime

# 创建蓝图实例
main_bp = Blueprint('main', __name__)
uploads_bp = Blueprint('uploads', __name__)

@main_bp.route('/health')
def health():
    """健康检查"""
    return jsonify({"status": "ok", "timestamp": datetime.now().isoformat(timespec='seconds')})

@uploads_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    """访问上传的图片/手册/视频文件"""
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
