"""
secp256k1 context for the threshold engine.
Utilities for:
    1. Curve domain parameters (read only, built once from the ecdsa package)
    2. EC point validation
    3. EC point addition, negation and scalar multiplication
    4. Scalar inverse mod order
    5. Fixed width encodings for scalars and points

    Arithmetic is delegated to ecdsa.ellipticcurve.PointJacobi. Points crossing
    module boundaries are plain affine (x, y) pairs so they can be compared,
    hashed and serialized without touching the library types.
"""

from collections import namedtuple

from ecdsa import SECP256k1
from ecdsa.ellipticcurve import INFINITY, PointJacobi

from .errors import MalformedInput

CurveParams = namedtuple("CurveParams", "name p a b order generator")

SCALAR_SIZE = 32
POINT_SIZE = 2 * SCALAR_SIZE

_curve = SECP256k1.curve
_jacobi_generator = SECP256k1.generator

# SECP256K1 domain params
p = int(_curve.p())
a = int(_curve.a())
b = int(_curve.b())
order = int(SECP256k1.order)


class Point(namedtuple("Point", "x y")):
    def __repr__(self):
        """Uncompressed"""
        if self.x is None:
            return "Origin"
        return f"04{self.x:0>64X}{self.y:0>64X}"


# The point at origin. This means generator * order = O
O = Point(None, None)

generator = Point(int(_jacobi_generator.x()), int(_jacobi_generator.y()))

SECP256K1 = CurveParams("secp256k1", p, a, b, order, generator)
#############################


def valid(P):
    """
    wiestrass curve: y^2 = x^3 + ax + b
    Determine whether we have a valid representation of a point
    on our curve. Coordinates must already be reduced modulo p.
    """
    if P == O:
        return True
    if not isinstance(P.x, int) or not isinstance(P.y, int):
        return False
    return (
        0 <= P.x < p and 0 <= P.y < p and
        (P.y**2 - (P.x**3 + a*P.x + b)) % p == 0)


def scalar_inv_mod_order(x):
    """
    Compute an inverse for x modulo order, assuming that x
    is not divisible by order.
    """
    if x % order == 0:
        raise ZeroDivisionError("Impossible inverse")
    return pow(x, -1, order)


def _to_jacobi(P):
    if P == O:
        return INFINITY
    if P == generator:
        return _jacobi_generator
    return PointJacobi(_curve, P.x, P.y, 1, order)


def _from_jacobi(J):
    if J is INFINITY or J == INFINITY:
        return O
    return Point(int(J.x()), int(J.y()))


def ec_inv(P):
    """
    Inverse of the point P, reflected over the x axis.
    """
    if P == O:
        return P
    return Point(P.x, (-P.y) % p)


def ec_add(P, Q):
    """
    Sum of the points P and Q.
    """
    if not (valid(P) and valid(Q)):
        raise MalformedInput("Invalid inputs")
    if P == O:
        return Q
    if Q == O:
        return P
    return _from_jacobi(_to_jacobi(P) + _to_jacobi(Q))


def ec_sub(P, Q):
    return ec_add(P, ec_inv(Q))


def ec_scalar_mul(P, scalar):
    if not valid(P):
        raise MalformedInput("Invalid inputs")
    scalar %= order
    if P == O or scalar == 0:
        return O
    return _from_jacobi(_to_jacobi(P) * scalar)


def ec_sum(points):
    total = None
    for P in points:
        if not valid(P):
            raise MalformedInput("Invalid inputs")
        if P == O:
            continue
        total = _to_jacobi(P) if total is None else total + _to_jacobi(P)
    if total is None:
        return O
    return _from_jacobi(total)


def pub_key_from_priv(private):
    return ec_scalar_mul(generator, private)


def compressed(point) -> bytes:
    """SEC1 compressed form, used as hash input."""
    if point == O:
        raise MalformedInput("Cannot serialize the point at origin")
    prefix = b"\x02" if point.y % 2 == 0 else b"\x03"
    return prefix + point.x.to_bytes(SCALAR_SIZE, "big")


def scalar_to_bytes(value: int) -> bytes:
    if not isinstance(value, int) or not 0 <= value < order:
        raise MalformedInput("Scalar out of range")
    return value.to_bytes(SCALAR_SIZE, "big")


def scalar_from_bytes(data: bytes) -> int:
    if not isinstance(data, (bytes, bytearray)) or len(data) != SCALAR_SIZE:
        raise MalformedInput(f"Scalar must be exactly {SCALAR_SIZE} bytes")
    value = int.from_bytes(data, "big")
    if value >= order:
        raise MalformedInput("Scalar is not below the curve order")
    return value


def point_to_bytes(point) -> bytes:
    """Affine x || y, 32 bytes each."""
    if point == O:
        raise MalformedInput("Cannot serialize the point at origin")
    return point.x.to_bytes(SCALAR_SIZE, "big") + point.y.to_bytes(SCALAR_SIZE, "big")


def point_from_bytes(data: bytes) -> Point:
    if not isinstance(data, (bytes, bytearray)) or len(data) != POINT_SIZE:
        raise MalformedInput(f"Point must be exactly {POINT_SIZE} bytes")
    point = Point(int.from_bytes(data[:SCALAR_SIZE], "big"),
                  int.from_bytes(data[SCALAR_SIZE:], "big"))
    if not valid(point):
        raise MalformedInput("Point is not on secp256k1")
    return point


def as_point(value) -> Point:
    """
    Accept a Point, 64 raw bytes or their hex form and return a validated
    point that is not the origin.
    """
    if isinstance(value, str):
        try:
            value = bytes.fromhex(value)
        except ValueError as e:
            raise MalformedInput("Point is not valid hex") from e
    if isinstance(value, (bytes, bytearray)):
        return point_from_bytes(value)
    if not isinstance(value, tuple) or len(value) != 2:
        raise MalformedInput("Not a curve point")
    point = Point(*value)
    if point == O or not valid(point):
        raise MalformedInput("Point is not on secp256k1")
    return point
