from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from src.content_gateway import ImageAttachment, SubmissionPayload
from src.entities import BLOG_CATEGORIES, DEFAULT_BLOG_CATEGORY

MAX_IMAGE_BYTES = 5 * 1024 * 1024
MIN_REVIEW_LENGTH = 10
MAX_EXCERPT_LENGTH = 200
MAX_BLOG_IMAGES = 4
EMAIL_RE = re.compile(r"\S+@\S+\.\S+")

F = TypeVar("F")
FieldErrors = Dict[str, str]


def validate_image(image: Optional[ImageAttachment], max_bytes: int = MAX_IMAGE_BYTES) -> Optional[str]:
    if image is None:
        return None
    if image.size > max_bytes:
        return f"Image size must be less than {max_bytes // (1024 * 1024)}MB"
    if not (image.content_type or "").lower().startswith("image/"):
        return "Please select a valid image file"
    return None


def _required(value: str) -> bool:
    return bool((value or "").strip())


@dataclass
class ReviewFormInput:
    name: str = ""
    email: str = ""
    role: str = ""
    review: str = ""
    image: Optional[ImageAttachment] = None


def validate_review_form(
    form: ReviewFormInput, creating: bool = True, max_image_bytes: int = MAX_IMAGE_BYTES
) -> FieldErrors:
    errors: FieldErrors = {}
    if not _required(form.name):
        errors["name"] = "Name is required"
    email = (form.email or "").strip()
    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_RE.fullmatch(email):
        errors["email"] = "Invalid email format"
    if not _required(form.role):
        errors["role"] = "Role is required"
    review = (form.review or "").strip()
    if not review:
        errors["review"] = "Review is required"
    elif len(review) < MIN_REVIEW_LENGTH:
        errors["review"] = f"Review must be at least {MIN_REVIEW_LENGTH} characters"
    image_error = validate_image(form.image, max_image_bytes)
    if image_error:
        errors["image"] = image_error
    return errors


def review_payload(form: ReviewFormInput) -> SubmissionPayload:
    # Unset fields are left out entirely; on edit an absent `image` part tells
    # the server to keep the stored image.
    payload = SubmissionPayload()
    for key in ("name", "email", "role", "review"):
        value = (getattr(form, key) or "").strip()
        if value:
            payload.fields[key] = value
    if form.image is not None:
        payload.files.append(("image", form.image))
    return payload


@dataclass
class FaqFormInput:
    question: str = ""
    answer: str = ""


def validate_faq_form(form: FaqFormInput, creating: bool = True) -> FieldErrors:
    errors: FieldErrors = {}
    if not _required(form.question):
        errors["question"] = "Question is required"
    if not _required(form.answer):
        errors["answer"] = "Answer is required"
    return errors


def faq_payload(form: FaqFormInput) -> SubmissionPayload:
    return SubmissionPayload(fields={"question": form.question.strip(), "answer": form.answer.strip()})


@dataclass
class InfluencerFormInput:
    name: str = ""
    desc: str = ""
    keywords: str = ""
    pic: Optional[ImageAttachment] = None


def validate_influencer_form(
    form: InfluencerFormInput, creating: bool = True, max_image_bytes: int = MAX_IMAGE_BYTES
) -> FieldErrors:
    errors: FieldErrors = {}
    if not _required(form.name):
        errors["name"] = "Name is required"
    if not _required(form.desc):
        errors["desc"] = "Description is required"
    if creating and form.pic is None:
        errors["pic"] = "Please add a picture for a new influencer"
    pic_error = validate_image(form.pic, max_image_bytes)
    if pic_error:
        errors["pic"] = pic_error
    return errors


def influencer_payload(form: InfluencerFormInput) -> SubmissionPayload:
    keywords = ", ".join(part.strip() for part in (form.keywords or "").split(",") if part.strip())
    payload = SubmissionPayload(
        fields={"name": form.name.strip(), "desc": form.desc.strip(), "keywords": keywords}
    )
    if form.pic is not None:
        payload.files.append(("pic", form.pic))
    return payload


@dataclass
class BlogFormInput:
    title: str = ""
    excerpt: str = ""
    content: str = ""
    category: str = DEFAULT_BLOG_CATEGORY
    images: List[ImageAttachment] = field(default_factory=list)


def validate_blog_form(
    form: BlogFormInput, creating: bool = True, max_image_bytes: int = MAX_IMAGE_BYTES
) -> FieldErrors:
    errors: FieldErrors = {}
    if not _required(form.title):
        errors["title"] = "Title is required"
    if not _required(form.excerpt):
        errors["excerpt"] = "Excerpt is required"
    elif len(form.excerpt) > MAX_EXCERPT_LENGTH:
        errors["excerpt"] = f"Excerpt must be under {MAX_EXCERPT_LENGTH} characters"
    if not _required(form.content):
        errors["content"] = "Content is required"
    if form.category not in BLOG_CATEGORIES:
        errors["category"] = "Choose one of the listed categories"
    if not form.images:
        errors["images"] = "At least one image is required"
    elif len(form.images) > MAX_BLOG_IMAGES:
        errors["images"] = f"Add up to {MAX_BLOG_IMAGES} images"
    else:
        for image in form.images:
            image_error = validate_image(image, max_image_bytes)
            if image_error:
                errors["images"] = f"{image.filename}: {image_error}"
                break
    return errors


def blog_payload(form: BlogFormInput) -> SubmissionPayload:
    payload = SubmissionPayload(
        fields={
            "title": form.title.strip(),
            "excerpt": form.excerpt.strip(),
            "content": form.content.strip(),
            "category": form.category,
        }
    )
    payload.files.extend(("images", image) for image in form.images)
    return payload


@dataclass
class PreparedSubmission:
    errors: FieldErrors
    payload: Optional[SubmissionPayload] = None

    @property
    def ok(self) -> bool:
        return not self.errors and self.payload is not None


class FormController(Generic[F]):
    """Validates a form input and serializes it once every rule passes."""

    def __init__(
        self,
        validate: Callable[[F, bool], FieldErrors],
        serialize: Callable[[F], SubmissionPayload],
    ) -> None:
        self._validate = validate
        self._serialize = serialize

    def validate(self, form: F, *, creating: bool) -> FieldErrors:
        return self._validate(form, creating)

    def prepare(self, form: F, *, creating: bool) -> PreparedSubmission:
        errors = self.validate(form, creating=creating)
        if errors:
            return PreparedSubmission(errors=errors)
        return PreparedSubmission(errors={}, payload=self._serialize(form))
