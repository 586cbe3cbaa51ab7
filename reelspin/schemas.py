from marshmallow import Schema, fields, validate, ValidationError, post_load, validates_schema
from marshmallow.validate import Range, Length

from reelspin.models import (
    FreeSpinCondition, FreeSpinRule, FreeSpinState, MachineConfig, Storage, WildSymbol
)

# --- Validators ---
def validate_number(value):
    """Accept ints and floats only (bool is an int subclass and is rejected)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError('Must be a number.')
    return value

def validate_non_negative_number(value):
    validate_number(value)
    if value < 0:
        raise ValidationError('Must be a non-negative number.')
    return value

def validate_prize_list(value):
    if not isinstance(value, list):
        raise ValidationError('Prize entries must be a list indexed by run length - 1.')
    for prize in value:
        validate_non_negative_number(prize)
    return value


# --- Machine definition ---
class WildSchema(Schema):
    index = fields.Integer(required=True, strict=True, validate=Range(min=0))

    @post_load
    def make_wild(self, data, **kwargs):
        return WildSymbol(**data)


class FreeSpinConditionSchema(Schema):
    count = fields.Integer(required=True, strict=True, validate=Range(min=1))
    total = fields.Integer(required=True, strict=True, validate=Range(min=0))
    multiply = fields.Raw(load_default=None, allow_none=True, validate=validate_non_negative_number)

    @post_load
    def make_condition(self, data, **kwargs):
        return FreeSpinCondition(**data)


class FreeSpinRuleSchema(Schema):
    index = fields.Integer(required=True, strict=True, validate=Range(min=0))
    conditions = fields.List(fields.Nested(FreeSpinConditionSchema), load_default=list)

    @post_load
    def make_rule(self, data, **kwargs):
        return FreeSpinRule(**data)


class MachineConfigSchema(Schema):
    name = fields.String(load_default=None, allow_none=True)
    description = fields.String(load_default=None, allow_none=True)
    reels = fields.List(
        fields.List(fields.Integer(strict=True, validate=Range(min=0)), validate=Length(min=1)),
        required=True, validate=Length(min=1)
    )
    rows = fields.Integer(required=True, strict=True, validate=Range(min=1))
    lines = fields.List(fields.List(fields.Integer(strict=True, validate=Range(min=0))), required=True)
    prize_table = fields.Dict(
        keys=fields.Integer(validate=Range(min=0)),
        values=fields.Raw(validate=validate_prize_list),
        required=True, data_key='prizeTable'
    )
    wild = fields.Nested(WildSchema, load_default=None, allow_none=True)
    free_spin = fields.Nested(FreeSpinRuleSchema, load_default=None, allow_none=True, data_key='freeSpin')

    @validates_schema
    def validate_layout(self, data, **kwargs):
        reels = data.get('reels') or []
        rows = data.get('rows')
        errors = {}

        empty_reels = [i for i, weights in enumerate(reels) if sum(weights) <= 0]
        if empty_reels:
            errors['reels'] = [f"Reel {i} has a total weight of 0 and cannot be drawn from." for i in empty_reels]

        line_errors = []
        for i, line in enumerate(data.get('lines') or []):
            if len(line) != len(reels):
                line_errors.append(f"Line {i} has {len(line)} entries, expected one per reel ({len(reels)}).")
            elif rows is not None and any(row >= rows for row in line):
                line_errors.append(f"Line {i} references a row outside [0, {rows}).")
        if line_errors:
            errors['lines'] = line_errors

        if errors:
            raise ValidationError(errors)

    @post_load
    def make_config(self, data, **kwargs):
        return MachineConfig(**data)


# --- Spin state ---
class FreeSpinStateSchema(Schema):
    multiplier = fields.Raw(load_default=1, validate=validate_non_negative_number)
    symbols = fields.Integer(load_default=0, strict=True, validate=Range(min=0))
    total = fields.Integer(load_default=0, strict=True) # not floored, see digest()

    @post_load
    def make_state(self, data, **kwargs):
        return FreeSpinState(**data)


class StorageSchema(Schema):
    free_spin = fields.Nested(FreeSpinStateSchema, load_default=None, allow_none=True, data_key='freeSpin')

    @post_load
    def make_storage(self, data, **kwargs):
        return Storage(**data)


class LineWinSchema(Schema):
    index = fields.Integer()
    combo = fields.Integer()
    prize = fields.Raw()
    wc = fields.Integer()
    ss = fields.List(fields.Integer())


class SpinResultSchema(Schema):
    prize = fields.Raw()
    lines = fields.List(fields.Nested(LineWinSchema))
    exit_storage = fields.Nested(StorageSchema, data_key='exitStorage')


class SpinRequestSchema(Schema):
    machine = fields.String(required=True, validate=validate.Regexp(r'^[A-Za-z0-9_-]+$', error='Invalid machine name.'))
    max_lines = fields.Integer(required=True, strict=True, validate=Range(min=0), data_key='maxLines')
    bet_per_line = fields.Raw(required=True, validate=validate_non_negative_number, data_key='betPerLine')
    storage = fields.Nested(StorageSchema, load_default=None, allow_none=True)
