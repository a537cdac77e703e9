import click
import inspect as py_inspect
from collections import defaultdict
from sqlalchemy import inspect
from .extensions import db
from .repositories import MaintenanceRepository

def register_commands(app):
    @app.cli.command("init-db")
    @click.option('--no-seed', is_flag=True, help='只建表，不写入默认维修标签')
    def init_db(no_seed):
        """初始化数据库（建表并写入默认维修标签）."""
        logger = app.logger
        logger.info("🚀 Starting database initialization")
        logger.info(f"🔧 Database URI: {app.config['SQLALCHEMY_DATABASE_URI']}")

        # 确保模型已导入
        from . import models

        try:
            db.create_all()
            tables = inspect(db.engine).get_table_names()
            logger.info(f"📊 Created tables: {tables}")
        except Exception as e:
            logger.error(f"❌ Database creation failed: {str(e)}", exc_info=True)
            raise

        if not no_seed:
            added = MaintenanceRepository(db.session).seed_default_tags()
            logger.info(f"🏷️ Seeded {added} default maintenance tags")

        logger.info("🎉 Database initialization completed successfully")

    @app.cli.command("seed-tags")
    def seed_tags():
        """写入默认维修标签（已存在的标签名跳过）."""
        added = MaintenanceRepository(db.session).seed_default_tags()
        click.echo(f"Seeded {added} default maintenance tags")

    @app.cli.command("drop-tables")
    @click.option('--force', is_flag=True, help='跳过确认直接执行')
    def drop_tables(force):
        """删除所有数据库表（危险操作！）"""
        logger = app.logger

        # 生产环境保护
        if app.config.get("ENV") == 'production' and not force:
            logger.error("❌ 生产环境禁止直接删除表！")
            return

        if not force:
            tables = inspect(db.engine).get_table_names()
            click.echo("\n⚠️ 将要删除以下表：")
            for table in tables:
                click.echo(f"  - {table}")

            if not click.confirm("\n❗ 确认要删除所有表吗？此操作不可恢复！"):
                logger.info("取消删除操作")
                return

        from . import models

        logger.warning("🗑️ 开始删除数据库表...")
        db.drop_all()

        remaining_tables = inspect(db.engine).get_table_names()
        if not remaining_tables:
            logger.info("✅ 所有表已成功删除")
        else:
            logger.error(f"❌ 表删除不完整，剩余表: {remaining_tables}")

    @app.cli.command("list-routes")
    def list_routes():
        """列出所有API端点及其注释和HTTP方法."""
        routes = defaultdict(list)

        for rule in app.url_map.iter_rules():
            if rule.endpoint.startswith('static'):
                continue
            view_func = app.view_functions[rule.endpoint]

            docstring = py_inspect.getdoc(view_func) or "无文档注释"
            docstring = docstring.split('\n')[0].strip()

            methods = sorted(m for m in rule.methods if m not in ('HEAD', 'OPTIONS'))
            routes[rule.endpoint].append({"path": str(rule), "methods": methods, "doc": docstring})

        output = [
            f"{', '.join(info['methods']):>10} {info['path']:50} {info['doc']}"
            for infos in routes.values() for info in infos
        ]

        click.echo("\nRegistered Routes:")
        click.echo("-" * 120)
        click.echo("\n".join(sorted(output)))
        click.echo("-" * 120)
        click.echo(f"Total: {len(output)} routes\n")
