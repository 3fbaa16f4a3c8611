"""HTTP route definitions for the book catalog."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Request, Response, status

from schemas import BookRequest, BookResponse

from ..domain.book import Book
from ..domain.catalog import CrudService
from ..domain.contracts import BookDraft
from ..domain.validation import MAX_RECORD_ID

router = APIRouter(prefix="/api/books", tags=["books"])

BookService = CrudService[Book, BookDraft]


def get_book_service(request: Request) -> BookService:
    service: BookService = request.app.state.book_service
    return service


def _to_response(book: Book) -> BookResponse:
    return BookResponse(
        id=book.book_id,
        title=book.title,
        author=book.author,
        genre=book.genre,
        publication=book.publication,
    )


def _to_draft(payload: BookRequest) -> BookDraft:
    return BookDraft(
        title=payload.title,
        author=payload.author,
        genre=payload.genre,
        publication=payload.publication,
    )


@router.get("", response_model=list[BookResponse])
def list_books(service: BookService = Depends(get_book_service)) -> list[BookResponse]:
    """Return every book ordered by id."""
    return [_to_response(book) for book in service.list()]


@router.get("/{book_id}", response_model=BookResponse)
def get_book(
    book_id: int = Path(ge=1, le=MAX_RECORD_ID),
    service: BookService = Depends(get_book_service),
) -> BookResponse:
    return _to_response(service.get(book_id))


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
def create_book(payload: BookRequest, service: BookService = Depends(get_book_service)) -> BookResponse:
    """Validate and store a new book."""
    return _to_response(service.create(_to_draft(payload)))


@router.put("/{book_id}", response_model=BookResponse)
def update_book(
    payload: BookRequest,
    book_id: int = Path(ge=1, le=MAX_RECORD_ID),
    service: BookService = Depends(get_book_service),
) -> BookResponse:
    return _to_response(service.update(book_id, _to_draft(payload)))


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(
    book_id: int = Path(ge=1, le=MAX_RECORD_ID),
    service: BookService = Depends(get_book_service),
) -> Response:
    service.delete(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
