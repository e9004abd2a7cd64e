from sqlalchemy import Column, DateTime, Integer, Numeric, Text, func
from database import Base

class Course(Base):
    __tablename__ = "courses"
    # AUTOINCREMENT keeps SQLite's counter in sqlite_sequence, which reset_sequence rewrites
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    description = Column(Text)
    long_description = Column(Text)
    duration = Column(Text)
    price = Column(Numeric(asdecimal=False))
    level = Column(Text)
    image_url = Column(Text)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Course {self.id} {self.title!r}>"
