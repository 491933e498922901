import pytest

from src.content_gateway import ImageAttachment
from src.forms import (
    MAX_IMAGE_BYTES,
    BlogFormInput,
    FaqFormInput,
    FormController,
    InfluencerFormInput,
    ReviewFormInput,
    blog_payload,
    faq_payload,
    influencer_payload,
    review_payload,
    validate_blog_form,
    validate_faq_form,
    validate_image,
    validate_influencer_form,
    validate_review_form,
)


def _image(size, content_type="image/jpeg", filename="photo.jpg"):
    return ImageAttachment(filename, content_type, b"x" * size)


def _review_form(**overrides):
    values = dict(
        name="Ana",
        email="ana@acme.io",
        role="CEO at Acme",
        review="Great work on our platform.",
    )
    values.update(overrides)
    return ReviewFormInput(**values)


class TestReviewValidation:
    def test_valid_form_has_no_errors(self):
        assert validate_review_form(_review_form()) == {}

    def test_required_fields(self):
        errors = validate_review_form(ReviewFormInput(name="  ", email="", role="", review=""))
        assert errors["name"] == "Name is required"
        assert set(errors) == {"name", "email", "role", "review"}

    @pytest.mark.parametrize("email", ["ana", "ana@acme", "ana @acme.io", "@acme.io"])
    def test_invalid_email(self, email):
        assert validate_review_form(_review_form(email=email))["email"] == "Invalid email format"

    def test_review_of_nine_characters_is_rejected(self):
        errors = validate_review_form(_review_form(review="  123456789  "))
        assert errors == {"review": "Review must be at least 10 characters"}

    def test_review_of_ten_characters_is_accepted(self):
        assert validate_review_form(_review_form(review="1234567890")) == {}

    def test_image_at_limit_is_accepted(self):
        assert validate_review_form(_review_form(image=_image(MAX_IMAGE_BYTES))) == {}

    def test_image_over_limit_is_rejected(self):
        errors = validate_review_form(_review_form(image=_image(MAX_IMAGE_BYTES + 1)))
        assert errors == {"image": "Image size must be less than 5MB"}

    def test_non_image_is_rejected(self):
        assert validate_image(_image(10, "application/pdf", "cv.pdf")) == "Please select a valid image file"


class TestReviewPayload:
    def test_only_non_empty_fields_are_sent(self):
        payload = review_payload(_review_form(role="   "))
        assert payload.fields == {
            "name": "Ana",
            "email": "ana@acme.io",
            "review": "Great work on our platform.",
        }
        assert payload.files == []

    def test_image_is_attached_when_present(self, png_image):
        payload = review_payload(_review_form(image=png_image))
        assert payload.files == [("image", png_image)]
        assert payload.field_names()[-1] == "image"


class TestFaqForm:
    def test_question_and_answer_are_required(self):
        assert validate_faq_form(FaqFormInput()) == {
            "question": "Question is required",
            "answer": "Answer is required",
        }

    def test_payload_is_trimmed(self):
        payload = faq_payload(FaqFormInput(question=" Why? ", answer=" Because. "))
        assert payload.fields == {"question": "Why?", "answer": "Because."}


class TestInfluencerForm:
    def test_picture_required_on_create_only(self):
        form = InfluencerFormInput(name="Ria", desc="Data creator")
        assert "pic" in validate_influencer_form(form, creating=True)
        assert validate_influencer_form(form, creating=False) == {}

    def test_keywords_are_normalized(self, png_image):
        payload = influencer_payload(
            InfluencerFormInput(name="Ria", desc="Data creator", keywords=" ai,, python ,", pic=png_image)
        )
        assert payload.fields["keywords"] == "ai, python"
        assert payload.files == [("pic", png_image)]


class TestBlogForm:
    def _form(self, **overrides):
        values = dict(
            title="Shipping faster",
            excerpt="How we cut lead time.",
            content="Long form content.",
            category="Technology",
            images=[_image(100)],
        )
        values.update(overrides)
        return BlogFormInput(**values)

    def test_valid_form(self):
        assert validate_blog_form(self._form()) == {}

    def test_excerpt_length_limit(self):
        assert validate_blog_form(self._form(excerpt="x" * 200)) == {}
        assert "excerpt" in validate_blog_form(self._form(excerpt="x" * 201))

    def test_image_count_bounds(self):
        assert "images" in validate_blog_form(self._form(images=[]))
        assert "images" in validate_blog_form(self._form(images=[_image(10)] * 5))

    def test_unknown_category(self):
        assert "category" in validate_blog_form(self._form(category="Gossip"))

    def test_payload_repeats_images_field(self):
        images = [_image(10, filename="a.jpg"), _image(10, filename="b.jpg")]
        payload = blog_payload(self._form(images=images))
        assert [name for name, _ in payload.files] == ["images", "images"]
        assert payload.fields["category"] == "Technology"


class TestFormController:
    def test_prepare_blocks_invalid_input(self):
        controller = FormController(validate_review_form, review_payload)
        prepared = controller.prepare(_review_form(review="short"), creating=True)
        assert not prepared.ok
        assert prepared.payload is None

    def test_prepare_serializes_valid_input(self):
        controller = FormController(validate_review_form, review_payload)
        prepared = controller.prepare(_review_form(), creating=False)
        assert prepared.ok
        assert prepared.payload.fields["name"] == "Ana"
