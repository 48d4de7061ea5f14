from .document import Document, depopulate, is_populated
from .models import ModelRegistry, MotorModel
from .options import PopulateOptions, normalize_populate
from .populate import populate, assign_populated
from .queryset import MotorQuerySet
from .resolver import collect_populate_paths, resolve_ref_model
from .schema import Schema, Virtual
from .fields import *
from .connection import *

from . import connection, fields

__version__ = '0.1.0.dev0'

__all__ = (fields.__all__ + connection.__all__ +
           ['Document', 'depopulate', 'is_populated',
            'ModelRegistry', 'MotorModel', 'MotorQuerySet',
            'PopulateOptions', 'normalize_populate',
            'populate', 'assign_populated',
            'collect_populate_paths', 'resolve_ref_model',
            'Schema', 'Virtual'])
