# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que init_db() appelle create_all().

from student_records.models.user import User  # noqa: F401
from student_records.models.student import Student  # noqa: F401
from student_records.models.edit_request import EditRequest  # noqa: F401
