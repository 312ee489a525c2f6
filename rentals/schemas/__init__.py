from rentals.schemas.auth import Token, UserCreate, UserLogin, UserResponse, UserUpdate, ChangePasswordRequest
from rentals.schemas.amenity import AmenityCreate, AmenityUpdate, AmenityResponse
from rentals.schemas.booking import AvailabilityResponse, BookingCreate, BookingDetailResponse, BookingResponse, BookingStatusUpdate
from rentals.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate, UserReviewResponse
from rentals.schemas.admin import AdminStatusUpdate, SystemStats
