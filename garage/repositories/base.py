from contextlib import contextmanager
from sqlalchemy.exc import SQLAlchemyError
from ..errors import NotFound, StoreFailure
from ..utils.logger import get_logger


class BaseRepository:
    """
    仓储基类

    每个仓储在构造时持有一个会话（通常是 db.session），所有操作只返回普通的
    dict/list 数据或抛出 garage.errors 中定义的异常
    """

    def __init__(self, session):
        self.session = session
        self.logger = get_logger(self.__class__.__module__)

    @contextmanager
    def atomic(self, action: str):
        """
        事务边界：代码块正常结束则提交，任何异常都回滚

        SQLAlchemy 异常转换为 StoreFailure，业务异常原样抛出
        """
        try:
            yield
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            self.logger.error(f"{action} 失败，事务已回滚: {str(e)}")
            raise StoreFailure(f"Failed to {action}") from e
        except Exception:
            self.session.rollback()
            raise

    def get_or_404(self, model, ident, entity: str):
        obj = self.session.get(model, ident)
        if obj is None:
            raise NotFound(entity)
        return obj
