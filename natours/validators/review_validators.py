from pydantic import field_validator


class ReviewValidatorMixin:
    @field_validator('review', check_fields=False)
    @classmethod
    def review_not_empty(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError('Review can not be empty!')
        return v.strip()

    @field_validator('rating', check_fields=False)
    @classmethod
    def rating_valid(cls, v):
        if v is not None and (v < 1 or v > 5):
            raise ValueError('Rating must be between 1 and 5')
        return v
