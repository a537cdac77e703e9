from ..extensions import db

# 多对多关联表（维修记录 <-> 维修标签），复合主键保证 (log_id, tag_id) 唯一
maintenance_log_tags = db.Table(
    'maintenance_log_tags',
    db.Column('log_id', db.Integer, db.ForeignKey('maintenance_logs.id', ondelete='CASCADE'), primary_key=True, comment='维修记录ID'),
    db.Column('tag_id', db.Integer, db.ForeignKey('maintenance_tags.id', ondelete='CASCADE'), primary_key=True, comment='标签ID'),
)
