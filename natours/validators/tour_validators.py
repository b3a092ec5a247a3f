from pydantic import field_validator, model_validator


class TourValidatorMixin:
    @field_validator('name', check_fields=False)
    @classmethod
    def name_length(cls, v):
        if v is None:
            return v
        v = v.strip()
        if len(v) < 10:
            raise ValueError('A tour name must have more or equal than 10 characters')
        if len(v) > 40:
            raise ValueError('A tour name must have less or equal than 40 characters')
        return v

    @field_validator('summary', check_fields=False)
    @classmethod
    def summary_not_empty(cls, v):
        if v is not None and not v.strip():
            raise ValueError('A tour must have a summary')
        return v.strip() if v is not None else v

    @model_validator(mode='after')
    def discount_below_price(self):
        price = getattr(self, 'price', None)
        discount = getattr(self, 'price_discount', None)
        # Partial updates carry no price; the service re-checks against the stored one
        if price is not None and discount is not None and discount >= price:
            raise ValueError(f'Discount price ({discount}) should be below regular price')
        return self
