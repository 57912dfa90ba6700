'''
General python utilities used by the krylov code.

Methods / Classes in this one shouldn't require non-standard imports.
'''

import math

class Freezable():
    'a class where you can freeze the fields (prevent new fields from being created)'

    _frozen = False

    def freeze_attrs(self):
        'prevents any new attributes from being created in the object'
        self._frozen = True

    def __setattr__(self, key, value):
        if self._frozen and not hasattr(self, key):
            raise TypeError("{} does not contain attribute '{}' (object was frozen)".format(self, key))

        object.__setattr__(self, key, value)

def matrix_to_string(m):
    'get a matrix as a string'

    return "\n".join([", ".join(["{:.6g}".format(val) for val in row]) for row in m])

def round_sigdigits(val, sigdigits):
    '''round a positive float to the given number of significant digits

    zero (and non-finite values) are returned unchanged
    '''

    if val == 0 or not math.isfinite(val):
        return val

    digits = sigdigits - 1 - int(math.floor(math.log10(abs(val))))

    return round(val, digits)
