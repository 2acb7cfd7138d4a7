import logging

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates

from sparse_calc.models.workspace_storage import EDITABLE, NonFiniteResultError, WorkspaceStorage

logger = logging.getLogger(__name__)


class BaseSchema(Schema):
    class Meta:
        unknown = EXCLUDE


class RejectBoolMixin:
    """JSON true/false are not numbers here, even though bool subclasses int"""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, bool):
            raise self.make_error('invalid')
        return super()._deserialize(value, attr, data, **kwargs)


class StrictInteger(RejectBoolMixin, fields.Integer):
    pass


class StrictFloat(RejectBoolMixin, fields.Float):
    pass


class EntrySchema(BaseSchema):
    row = StrictInteger(required=True, strict=True, validate=validate.Range(min=1))
    col = StrictInteger(required=True, strict=True, validate=validate.Range(min=1))
    value = StrictFloat(required=True, allow_nan=False)


class ScalarSchema(BaseSchema):
    k = StrictFloat(required=True, allow_nan=False)


class OperatorSchema(BaseSchema):
    operator = fields.String(required=True, validate=validate.OneOf(['+', '-', '*']))


class DescriptionSchema(BaseSchema):
    text = fields.String(required=True)

    @validates('text')
    def validate_text(self, value, **kwargs):
        if not value.strip():
            raise ValidationError('Matrix description is empty')


class ResetSchema(BaseSchema):
    size = StrictInteger(strict=True, load_default=None, allow_none=True,
                         validate=validate.Range(min=1))


class MatrixService:
    """Validates calculator requests and applies them to the workspace"""

    def __init__(self, max_size=None):
        self.workspace = WorkspaceStorage(max_size=max_size)

    def _check_target(self, target):
        if target not in EDITABLE:
            raise ValidationError(f"Matrix '{target}' cannot be edited, use one of: {', '.join(EDITABLE)}")

    def _apply(self, operation, *args):
        try:
            return operation(*args)
        except NonFiniteResultError as e:
            raise ValidationError(str(e))

    def get_state(self):
        """Full workspace state"""
        return self.workspace.get_state()

    def get_matrix(self, name):
        """Matrix by name: a, b or result"""
        return self.workspace.get_matrix(name)

    def get_stats(self):
        return self.workspace.get_stats()

    def get_description(self):
        return self.workspace.get_description()

    def change_entry(self, target, data):
        """Changes one entry; row and col arrive 1-indexed"""
        self._check_target(target)
        entry = EntrySchema().load(data or {})
        try:
            return self.workspace.change_entry(target, entry['row'] - 1, entry['col'] - 1, entry['value'])
        except IndexError:
            size = self.workspace.get_matrix(target).size
            logger.warning("Rejected entry (%d, %d) for a %dx%d matrix", entry['row'], entry['col'], size, size)
            raise ValidationError(f"Row and column must be between 1 and {size}")
        except NonFiniteResultError as e:
            raise ValidationError(str(e))

    def transpose(self, target):
        self._check_target(target)
        return self._apply(self.workspace.transpose, target)

    def scalar_multiply(self, target, data):
        self._check_target(target)
        payload = ScalarSchema().load(data or {})
        return self._apply(self.workspace.scalar_multiply, target, payload['k'])

    def set_operator(self, data):
        payload = OperatorSchema().load(data or {})
        return self._apply(self.workspace.set_operator, payload['operator'])

    def load_description(self, data):
        payload = DescriptionSchema().load(data or {})
        return self._apply(self.workspace.load_description, payload['text'])

    def reset(self, data):
        payload = ResetSchema().load(data or {})
        try:
            return self.workspace.reset(payload['size'])
        except ValueError as e:
            raise ValidationError({'size': [str(e)]})
