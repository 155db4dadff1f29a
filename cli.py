import sys
import typer
from rich.console import Console
from rich.table import Table
from typing import Optional
from datetime import datetime
from loguru import logger
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from lesson_srs import database
from lesson_srs.clock import FixedClock, SystemClock
from lesson_srs.config import get_settings
from lesson_srs.crud import (
    create_user, get_user, create_course, create_lesson, get_lesson,
    record_quiz_attempt, get_review, record_attempt, list_reviews, get_review_stats
)
from lesson_srs.exceptions import SRSError
from lesson_srs.schemas import (
    AttemptSubmission, CourseCreate, LessonCreate, QuizAttemptCreate,
    ReviewFilter, UserCreate
)
from lesson_srs.sm2 import SM2Algorithm, motivation_message

app = typer.Typer(help="Lesson SRS - spaced repetition scheduling for lesson quizzes")
console = Console()

STATUS_STYLES = {
    "new": "blue",
    "learning": "yellow",
    "reviewing": "cyan",
    "mastered": "green",
}


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")):
    """Configure logging for every command"""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else get_settings().log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )


def _clock(today: Optional[str]):
    """Clock for a command; --today pins the calendar day"""
    if today:
        return FixedClock(datetime.strptime(today, "%Y-%m-%d").date())
    return SystemClock()


def _fail(message: str):
    console.print(f"[red]✗[/red] {message}")
    raise typer.Exit(code=1)


@app.command()
def init():
    """Initialize database tables"""
    database.init_db()
    console.print("[green]✓[/green] Database initialized successfully!")


@app.command()
def reset_db(yes: bool = typer.Option(False, "--yes", help="Skip confirmation")):
    """Delete all data and reinitialize database (WARNING: irreversible!)"""
    if not yes and not typer.confirm("⚠️  This will DELETE ALL DATA. Are you sure?"):
        console.print("[yellow]Cancelled.[/yellow]")
        return

    console.print("[yellow]Dropping all tables...[/yellow]")
    database.drop_db()
    console.print("[yellow]Recreating tables...[/yellow]")
    database.init_db()
    console.print("[green]✓[/green] Database reset complete! All data deleted.")


@app.command()
def add_user(
    name: str = typer.Option(..., prompt="Learner name"),
    email: str = typer.Option(..., prompt="Email")
):
    """Create a learner"""
    db = database.SessionLocal()
    try:
        user = create_user(db, UserCreate(name=name, email=email))
        console.print(f"[green]✓[/green] User created! User ID: {user.id}")
    except IntegrityError:
        _fail("Email already registered")
    finally:
        db.close()


@app.command()
def add_course(
    user_id: int = typer.Option(..., prompt="User ID"),
    title: str = typer.Option(..., prompt="Course title"),
    topic: str = typer.Option(..., prompt="Topic"),
    level: str = typer.Option("beginner", help="beginner, intermediate or advanced")
):
    """Create a course"""
    db = database.SessionLocal()
    try:
        course = create_course(db, CourseCreate(user_id=user_id, title=title, topic=topic, level=level))
        console.print(f"[green]✓[/green] Course created! Course ID: {course.id}")
    except SRSError as e:
        _fail(str(e))
    finally:
        db.close()


@app.command()
def add_lesson(
    course_id: int = typer.Option(..., prompt="Course ID"),
    title: str = typer.Option(..., prompt="Lesson title"),
    order: int = typer.Option(0, help="Position within the course")
):
    """Add a lesson to a course"""
    db = database.SessionLocal()
    try:
        lesson = create_lesson(db, LessonCreate(course_id=course_id, title=title, order=order))
        console.print(f"[green]✓[/green] Lesson created! Lesson ID: {lesson.id}")
    except SRSError as e:
        _fail(str(e))
    finally:
        db.close()


@app.command("record-attempt")
def record_attempt_command(
    user_id: int = typer.Option(..., prompt="User ID"),
    lesson_id: int = typer.Option(..., prompt="Lesson ID"),
    score: int = typer.Option(..., prompt="Quiz score (0-100)"),
    correct: int = typer.Option(0, help="Correct answers"),
    total: int = typer.Option(0, help="Total questions"),
    today: Optional[str] = typer.Option(None, help="Attempt date (YYYY-MM-DD), default: today")
):
    """Record a graded quiz attempt and reschedule the lesson review"""
    clock = _clock(today)
    db = database.SessionLocal()
    try:
        attempt = record_quiz_attempt(
            db,
            QuizAttemptCreate(
                user_id=user_id,
                lesson_id=lesson_id,
                score=score,
                correct_count=correct,
                total_count=total
            ),
            now=clock.now()
        )
        review = record_attempt(
            db,
            AttemptSubmission(user_id=user_id, lesson_id=lesson_id, score=score, attempt_id=attempt.id),
            clock=clock
        )

        console.print("[green]✓[/green] Attempt recorded!")
        console.print(f"  Next review: {review.next_review_date} (in {review.current_interval} days)")
        console.print(f"  Status: [{STATUS_STYLES[review.status]}]{review.status}[/]")
        console.print(f"  Ease: {review.ease_factor / 100:.2f}")
        console.print(f"  Average score: {review.average_score}%  Retention: {review.retention_rate}%")
        console.print(f"  {motivation_message(review.status, review.review_count - 1, score)}")
    except ValidationError as e:
        _fail(f"Invalid attempt: {e.errors()[0]['msg']}")
    except SRSError as e:
        _fail(str(e))
    finally:
        db.close()


@app.command()
def show_review(
    user_id: int,
    lesson_id: int,
    today: Optional[str] = typer.Option(None, help="Reference date (YYYY-MM-DD)")
):
    """Show the review record for one lesson"""
    clock = _clock(today)
    db = database.SessionLocal()
    try:
        review = get_review(db, user_id, lesson_id)
        if not review:
            console.print(f"[yellow]No review for user {user_id}, lesson {lesson_id}[/yellow]")
            return

        lesson = get_lesson(db, lesson_id)
        console.print(f"\n[bold]{lesson.title}[/bold]")
        console.print(f"  Status: [{STATUS_STYLES[review.status]}]{review.status}[/]")
        console.print(f"  Reviews: {review.review_count}")
        console.print(f"  Next review: {review.next_review_date}")
        days_overdue = SM2Algorithm.get_days_overdue(review.next_review_date, clock.today())
        if days_overdue:
            console.print(f"  [red]Overdue by {days_overdue} days[/red]")
        console.print(f"  Interval: {review.current_interval} days  Ease: {review.ease_factor / 100:.2f}")
        console.print(f"  Last score: {review.last_score}%  Average: {review.average_score}%  Retention: {review.retention_rate}%")
    finally:
        db.close()


@app.command("list-reviews")
def list_reviews_command(
    user_id: int,
    review_filter: ReviewFilter = typer.Option(ReviewFilter.ALL, "--filter", "-f", case_sensitive=False),
    today: Optional[str] = typer.Option(None, help="Reference date (YYYY-MM-DD)")
):
    """List lesson reviews (due, overdue, upcoming or all)"""
    clock = _clock(today)
    db = database.SessionLocal()
    try:
        items = list_reviews(db, user_id, review_filter, clock=clock)
        if not items:
            console.print(f"[yellow]No {review_filter.value} reviews for user {user_id}[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Course", style="cyan")
        table.add_column("Lesson", style="green")
        table.add_column("Next Review", style="yellow")
        table.add_column("Interval", justify="right")
        table.add_column("Status")
        table.add_column("Retention", justify="right")

        for item in items:
            table.add_row(
                item.course_title,
                item.lesson_title[:50],
                str(item.next_review_date),
                f"{item.current_interval}d",
                f"[{STATUS_STYLES[item.status.value]}]{item.status.value}[/]",
                f"{item.retention_rate}%"
            )

        console.print(table)
    finally:
        db.close()


@app.command()
def stats(
    user_id: int,
    today: Optional[str] = typer.Option(None, help="Reference date (YYYY-MM-DD)")
):
    """View retention statistics and study streak"""
    clock = _clock(today)
    db = database.SessionLocal()
    try:
        user = get_user(db, user_id)
        if not user:
            _fail(f"User ID {user_id} not found")

        summary = get_review_stats(db, user_id, clock=clock)

        console.print(f"\n[bold]Review Statistics - {user.name}[/bold]\n")
        console.print(f"  Lessons tracked: {summary.total}")
        console.print(f"  Due today: {summary.due_today}  Overdue: {summary.overdue}  Upcoming: {summary.upcoming}")
        console.print(f"  Average retention: {summary.avg_retention}%  Average score: {summary.avg_score}%")
        console.print(f"  Streak: {summary.streak.current} days (longest {summary.streak.longest})")

        table = Table(show_header=True, header_style="bold magenta")
        for status, style in STATUS_STYLES.items():
            table.add_column(status.capitalize(), style=style, justify="right")
        counts = summary.status_counts
        table.add_row(str(counts.new), str(counts.learning), str(counts.reviewing), str(counts.mastered))
        console.print(table)
    finally:
        db.close()


def run():
    app()


if __name__ == "__main__":
    run()
