"""
Generic REST resource handler using Rails-like naming for its actions.

    GET     /api/<resource>          ->  index
    POST    /api/<resource>          ->  create
    GET     /api/<resource>/<pk>     ->  show
    PUT     /api/<resource>/<pk>     ->  upsert
    PATCH   /api/<resource>/<pk>     ->  patch
    DELETE  /api/<resource>/<pk>     ->  destroy

Every action runs one or two ORM calls and shapes the outcome through the
helpers below. An absent entity ends the request with an empty 404, a
rejected list filter ends it with the serialized error at 400, any other
failure ends it with the serialized error at 500.
"""
import logging

import jsonpatch
from django.core.exceptions import FieldDoesNotExist, ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework import status, viewsets
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

ID_FIELD = 'id'


class EntityNotFound(Exception):
    """Raised to stop an action when the addressed entity does not exist."""


class InvalidPatchDocument(jsonpatch.InvalidJsonPatch):
    pass


class InvalidResourceDocument(ValueError):
    """Raised when a request body is not an object of entity fields."""


def serialize_error(exc):
    body = {
        'name': exc.__class__.__name__,
        'message': str(exc),
    }
    if isinstance(exc, APIException):
        body['message'] = str(exc.default_detail)
        body['errors'] = exc.detail
    return body


def strip_id(fields):
    """Return a copy of the incoming field set without its ``id`` key."""
    if not isinstance(fields, dict):
        raise InvalidResourceDocument(
            f"Document is expected to be an object of fields, got {type(fields).__name__}"
        )
    return {key: value for key, value in fields.items() if key != ID_FIELD}


def strip_id_operations(patches):
    """Drop patch operations that would touch ``/id``."""
    if not isinstance(patches, list):
        return patches
    id_path = f'/{ID_FIELD}'
    return [
        operation for operation in patches
        if not (isinstance(operation, dict) and id_path in (operation.get('path'), operation.get('from')))
    ]


class ResourceViewSet(viewsets.GenericViewSet):
    """
    Index/show/create/upsert/patch/destroy over the model behind
    ``queryset``, serialized with ``serializer_class``.

    Subclasses only declare the queryset, the serializer and, optionally,
    the list filters.
    """
    pagination_class = None

    # Helpers

    def respond_with_result(self, entity, status_code=status.HTTP_200_OK, many=False):
        if entity is None:
            return None
        serializer = self.get_serializer(entity, many=many)
        return Response(serializer.data, status=status_code)

    def handle_entity_not_found(self, entity):
        if entity is None:
            raise EntityNotFound()
        return entity

    def patch_updates(self, entity, patches):
        """
        Apply ``patches`` to the serialized entity and save the result.

        The patched document is validated by the serializer before anything
        is written, so a failing operation leaves the stored row untouched.
        """
        if not isinstance(patches, list):
            raise InvalidPatchDocument(
                "Document is expected to be a sequence of patch operations"
            )
        document = dict(self.get_serializer(entity).data)
        patched = jsonpatch.apply_patch(document, patches)
        self.fill_removed_fields(entity, patched)

        serializer = self.get_serializer(entity, data=patched)
        serializer.is_valid(raise_exception=True)
        return serializer.save()

    def fill_removed_fields(self, entity, patched):
        """
        Give writable fields that the patch removed an explicit value.

        Nullable fields become ``None``, others fall back to the model default.
        Required fields without a default stay missing and fail validation.
        """
        serializer = self.get_serializer(entity)
        for name, field in serializer.fields.items():
            if field.read_only or name in patched:
                continue
            if field.allow_null:
                patched[name] = None
                continue
            try:
                model_field = entity._meta.get_field(field.source)
            except FieldDoesNotExist:
                continue
            if model_field.has_default():
                patched[name] = model_field.get_default()

    def remove_entity(self, entity):
        if entity is None:
            return None
        entity.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    def handle_error(self, exc, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR):
        message = f"{self.__class__.__name__}.{self.action} failed: {exc!r}"
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(message, exc_info=exc)
        else:
            logger.warning(message)
        return Response(serialize_error(exc), status=status_code)

    # Data access

    def parse_pk(self, pk):
        return self.get_queryset().model._meta.pk.to_python(pk)

    def find_entity(self, pk, for_update=False):
        try:
            pk = self.parse_pk(pk)
        except DjangoValidationError:
            return None
        queryset = self.get_queryset()
        if for_update:
            queryset = queryset.select_for_update()
        return queryset.filter(pk=pk).first()

    # Error handling

    def get_exception_handler(self):
        return self.resolve_exception

    def resolve_exception(self, exc, context):
        if isinstance(exc, EntityNotFound):
            return Response(status=status.HTTP_404_NOT_FOUND)
        if isinstance(exc, APIException) and not isinstance(exc, ValidationError):
            return exception_handler(exc, context)
        return self.handle_error(exc)

    # Actions

    def index(self, request):
        """Gets the list of entities"""
        try:
            queryset = self.filter_queryset(self.get_queryset())
        except ValidationError as exc:
            return self.handle_error(exc, status.HTTP_400_BAD_REQUEST)
        return self.respond_with_result(queryset, many=True)

    def show(self, request, pk=None):
        """Gets a single entity from the DB"""
        entity = self.handle_entity_not_found(self.find_entity(pk))
        return self.respond_with_result(entity)

    def create(self, request):
        """Creates a new entity in the DB"""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            entity = serializer.save()
        logger.info(f"Created {entity.__class__.__name__} {entity.pk}")
        return self.respond_with_result(entity, status.HTTP_201_CREATED)

    def upsert(self, request, pk=None):
        """Upserts the given entity in the DB at the specified ID"""
        fields = strip_id(request.data)
        with transaction.atomic():
            entity = self.find_entity(pk, for_update=True)
            serializer = self.get_serializer(entity, data=fields)
            serializer.is_valid(raise_exception=True)
            if entity is None:
                entity = serializer.save(pk=self.parse_pk(pk))
            else:
                entity = serializer.save()
        return self.respond_with_result(entity)

    def patch(self, request, pk=None):
        """Updates an existing entity in the DB"""
        patches = strip_id_operations(request.data)
        with transaction.atomic():
            entity = self.handle_entity_not_found(self.find_entity(pk, for_update=True))
            entity = self.patch_updates(entity, patches)
        return self.respond_with_result(entity)

    def destroy(self, request, pk=None):
        """Deletes an entity from the DB"""
        with transaction.atomic():
            entity = self.handle_entity_not_found(self.find_entity(pk, for_update=True))
            return self.remove_entity(entity)
