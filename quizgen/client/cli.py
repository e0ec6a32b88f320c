"""Command-line client: generate a quiz from a PDF and take it in the terminal."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from quizgen.client.credentials import CredentialStore
from quizgen.client.http import DEFAULT_BASE_URL, QuizServiceClient
from quizgen.client.poller import StatusPoller
from quizgen.errors import QuizGenError
from quizgen.quiz.models import QuestionRecord
from quizgen.quiz.session import QuizSession

logger = logging.getLogger("quizgen.client.cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def _build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(prog="quizgen", description="Generate multiple-choice quizzes from PDF documents.")
  parser.add_argument("--verbose", action="store_true", help="Log client activity to stderr.")
  commands = parser.add_subparsers(dest="command", required=True)

  generate = commands.add_parser("generate", help="Upload a PDF and wait for the generated questions.")
  generate.add_argument("file", type=Path, help="PDF document to generate questions from.")
  generate.add_argument("--api-key", help="Generation service API key (defaults to the saved key).")
  generate.add_argument("--save-key", action="store_true", help="Remember --api-key for later runs.")
  generate.add_argument("--sync", action="store_true", help="Wait on a single request instead of polling a background job.")
  generate.add_argument("--output", type=Path, help="Write the generated questions to this JSON file.")
  generate.add_argument("--base-url", default=DEFAULT_BASE_URL, help=f"Quiz service URL (default: {DEFAULT_BASE_URL}).")

  quiz = commands.add_parser("quiz", help="Take the most recently generated quiz.")
  quiz.add_argument("--shuffle", action="store_true", help="Ask the questions in random order.")
  quiz.add_argument("--base-url", default=DEFAULT_BASE_URL, help=f"Quiz service URL (default: {DEFAULT_BASE_URL}).")

  commands.add_parser("forget-key", help="Delete the saved API key.")
  return parser


def _resolve_key(args: argparse.Namespace, store: CredentialStore) -> str | None:
  """Prefer an explicit key, saving it when asked; a blank one counts as missing."""
  if args.api_key is None:
    return store.load()
  key = args.api_key.strip()
  if key and args.save_key:
    store.save(key)
  return key or None


def _write_records(path: Path, records: Sequence[QuestionRecord]) -> None:
  path.write_text(json.dumps([record.to_wire() for record in records], indent=2), encoding="utf-8")


async def _generate(args: argparse.Namespace, credential: str) -> int:
  document = args.file.read_bytes()
  logger.info("Submitting %s document_bytes=%d base_url=%s sync=%s", args.file.name, len(document), args.base_url, args.sync)

  async with QuizServiceClient(args.base_url) as client:
    if args.sync:
      print("Generating questions, this can take a few minutes...", file=sys.stderr)
      await client.submit(document, args.file.name, credential, with_polling=False)
      records = await client.fetch_mcqs() or ()
    else:
      async with StatusPoller(client, on_progress=lambda label: print(label, file=sys.stderr)) as poller:
        outcome = await poller.run(document, args.file.name, credential)
      outcome.raise_for_failure()
      records = outcome.result

  print(f"Generated {len(records)} questions.")
  if args.output is not None:
    _write_records(args.output, records)
    print(f"Saved questions to {args.output}")
  return EXIT_OK


def _ask(session: QuizSession, read: Callable[[str], str], write: Callable[[str], None]) -> None:
  question = session.current
  write(f"\nQuestion {session.position + 1} of {session.total}")
  write(question.question)
  for number, option in enumerate(question.options, start=1):
    write(f"  {number}. {option}")

  while True:
    raw = read("Your answer: ").strip()
    if raw.isdigit() and 1 <= int(raw) <= len(question.options):
      break
    write(f"Please enter a number between 1 and {len(question.options)}.")

  feedback = session.answer(question.options[int(raw) - 1])
  write("Correct!" if feedback.correct else f"Incorrect. The correct answer is: {feedback.correct_answer}")
  write(f"Explanation: {feedback.explanation}")
  session.advance()


def run_quiz(session: QuizSession, *, read: Callable[[str], str] = input, write: Callable[[str], None] = print) -> int:
  """Ask every question in turn and return the final score."""
  while not session.finished:
    _ask(session, read, write)
  write(f"\nQuiz complete. Score: {session.score}/{session.total}")
  return session.score


async def _fetch_latest(base_url: str) -> tuple[QuestionRecord, ...] | None:
  async with QuizServiceClient(base_url) as client:
    return await client.fetch_mcqs()


def main(argv: Sequence[str] | None = None) -> int:
  args = _build_parser().parse_args(argv)
  logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
  store = CredentialStore()

  if args.command == "forget-key":
    print("Saved API key removed." if store.clear() else "No saved API key.")
    return EXIT_OK

  try:
    if args.command == "generate":
      if not args.file.is_file():
        print(f"Error: {args.file} is not a file.", file=sys.stderr)
        return EXIT_USAGE
      credential = _resolve_key(args, store)
      if not credential:
        print("Error: an API key is required. Pass --api-key or save one with --save-key.", file=sys.stderr)
        return EXIT_USAGE
      return asyncio.run(_generate(args, credential))

    records = asyncio.run(_fetch_latest(args.base_url))
    if not records:
      print("No MCQs found. Generate a quiz first.", file=sys.stderr)
      return EXIT_FAILED
    run_quiz(QuizSession(records, shuffle=args.shuffle))
    return EXIT_OK
  except QuizGenError as exc:
    print(f"Error: {exc.message}", file=sys.stderr)
    return EXIT_FAILED
  except (KeyboardInterrupt, EOFError):
    print("\nCancelled.", file=sys.stderr)
    return EXIT_INTERRUPTED


if __name__ == "__main__":
  raise SystemExit(main())
