from dishka import Provider as DishkaProvider


class Provider(DishkaProvider):
    """Base for all DI providers in the project."""
