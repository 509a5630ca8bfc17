from itertools import islice

from models import ServiceSettings
from stats import NoStudentsForUnitError, unit_average, unit_newest_students
from student_api import ApiUnreachableError, FlakyStudentList, load_student_list
from student_iterator import StudentListIterator
from utils import setup_logging

settings = ServiceSettings()
logger = setup_logging(settings.log_level)

students = load_student_list(settings.resolve_data_path(), page_size=4)
# Every page times out twice before answering; with 3 retries nobody notices
flaky = FlakyStudentList(students, failures={page: 2 for page in range(students.get_num_pages())})

print("\n--- Demo: walking the list from both ends ---")
it = StudentListIterator(flaky, retries=settings.retries)
front, back = [], []
while it.has_next():
    front.append(next(it).get_id())
    if it.has_next():
        back.append(it.reverse_next().get_id())
print(f"Front: {front}")
print(f"Back:  {back}")
print(f"Page queries (incl. timeouts): {dict(sorted(flaky.page_requests.items()))}\n")

print("--- Demo: unit averages ---")
for unit in ["FIT1045", "FIT1008", "FIT2099", "FIT9999"]:
    try:
        print(f"  {unit}: {unit_average(students, unit, settings.retries)}")
    except NoStudentsForUnitError as e:
        print(f"  {unit}: {e}")
print()

print("--- Demo: newest FIT2099 students (only the pages needed are fetched) ---")
counted = FlakyStudentList(students)
newest = list(islice(unit_newest_students(counted, "FIT2099", settings.retries), 3))
print(f"Newest three: {[s.get_id() for s in newest]}")
print(f"Pages fetched: {sorted(counted.page_requests)}\n")

print("--- Demo: a page that never answers ---")
dead = FlakyStudentList(students, failures={0: settings.retries + 1})
try:
    StudentListIterator(dead, retries=settings.retries)
except ApiUnreachableError as e:
    logger.warning(f"Gave up: {e}")
