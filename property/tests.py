from unittest import mock

from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from property.models import Property


class PropertyAPITestCase(APITestCase):
    def setUp(self):
        self.property = Property.objects.create(
            name="Test Property",
            address="123 Test St",
            description="Two storey block",
        )
        self.list_url = reverse('properties:property-list')
        self.detail_url = self.detail(self.property.id)

    def detail(self, pk):
        return reverse('properties:property-detail', kwargs={'pk': pk})


class PropertyIndexTestCase(PropertyAPITestCase):
    def test_index_returns_every_property(self):
        Property.objects.create(name="Another Property", address="9 Side Rd")

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsInstance(response.data, list)
        self.assertEqual(
            [item['name'] for item in response.data],
            ["Another Property", "Test Property"],
        )

    def test_index_of_empty_collection_is_empty_array(self):
        Property.objects.all().delete()

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), [])

    def test_index_accepts_trailing_slash(self):
        response = self.client.get(self.list_url + '/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_index_filters_on_active_status(self):
        Property.objects.create(name="Closed Property", address="1 Old Rd", is_active=False)

        response = self.client.get(self.list_url, {'is_active': 'false'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['name'] for item in response.data], ["Closed Property"])

    def test_index_search_and_ordering(self):
        Property.objects.create(name="Zebra Court", address="123 Test St")
        Property.objects.create(name="Harbour View", address="7 Quay")

        response = self.client.get(self.list_url, {'search': 'Test St', 'ordering': '-name'})

        self.assertEqual([item['name'] for item in response.data], ["Zebra Court", "Test Property"])

    @mock.patch('property.views.PropertyViewSet.filter_queryset', side_effect=DatabaseError("connection lost"))
    def test_index_store_failure_returns_500(self, _filter_queryset):
        with self.assertLogs('utils.resources', level='ERROR') as logs:
            response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['name'], 'DatabaseError')
        self.assertEqual(response.data['message'], 'connection lost')
        self.assertIsNotNone(logs.records[0].exc_info)
        self.assertIs(logs.records[0].exc_info[0], DatabaseError)

    def test_index_invalid_filter_returns_400(self):
        response = self.client.get(self.list_url, {'created_at__gte': 'not-a-date'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['name'], 'ValidationError')
        self.assertIn('created_at__gte', response.data['errors'])

    def test_index_filters_on_creation_date(self):
        response = self.client.get(self.list_url, {'created_at__gte': '2000-01-01T00:00:00Z'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['name'] for item in response.data], ["Test Property"])


class PropertyShowTestCase(PropertyAPITestCase):
    def test_show_returns_persisted_state(self):
        Property.objects.filter(pk=self.property.pk).update(address="456 New St")

        response = self.client.get(self.detail_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.property.id)
        self.assertEqual(response.data['name'], "Test Property")
        self.assertEqual(response.data['address'], "456 New St")

    def test_show_missing_property_is_empty_404(self):
        response = self.client.get(self.detail(self.property.id + 1000))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.content, b'')

    def test_show_non_numeric_id_is_empty_404(self):
        response = self.client.get(self.detail('not-a-number'))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.content, b'')

    @mock.patch('django.db.models.query.QuerySet.first', side_effect=DatabaseError("connection lost"))
    def test_show_store_failure_returns_500(self, _first):
        response = self.client.get(self.detail_url)

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'name': 'DatabaseError', 'message': 'connection lost'})


class PropertyCreateTestCase(PropertyAPITestCase):
    def test_create_returns_201_with_generated_id(self):
        data = {
            'name': 'Riverside Flats',
            'address': '10 River Rd',
            'description': 'Six units',
            'is_active': False,
        }

        response = self.client.post(self.list_url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNotNone(response.data['id'])
        for field, value in data.items():
            self.assertEqual(response.data[field], value)
        created = Property.objects.get(pk=response.data['id'])
        self.assertEqual(created.name, 'Riverside Flats')
        self.assertFalse(created.is_active)

    def test_create_ignores_client_id(self):
        data = {'id': 4242, 'name': 'Hilltop', 'address': '2 Hill Rd'}

        response = self.client.post(self.list_url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotEqual(response.data['id'], 4242)
        self.assertFalse(Property.objects.filter(pk=4242).exists())

    def test_create_duplicate_name_returns_500_with_errors(self):
        data = {'name': 'Test Property', 'address': 'Elsewhere'}

        response = self.client.post(self.list_url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['name'], 'ValidationError')
        self.assertIn('name', response.data['errors'])
        self.assertEqual(Property.objects.count(), 1)

    def test_create_missing_required_field_returns_500(self):
        response = self.client.post(self.list_url, {'name': 'No Address'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertIn('address', response.data['errors'])

    def test_malformed_json_keeps_parse_error_status(self):
        response = self.client.post(
            self.list_url, '{"name": ', content_type='application/json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patch_on_collection_is_not_allowed(self):
        response = self.client.patch(self.list_url, [], format='json')

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    @mock.patch('property.models.Property.save', side_effect=DatabaseError("disk full"))
    def test_create_store_failure_returns_500(self, _save):
        data = {'name': 'Never Saved', 'address': '10 River Rd'}

        response = self.client.post(self.list_url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'name': 'DatabaseError', 'message': 'disk full'})
        self.assertEqual(Property.objects.count(), 1)


class PropertyUpsertTestCase(PropertyAPITestCase):
    def test_upsert_replaces_existing_property(self):
        data = {'name': 'Renamed Property', 'address': '1 Main St', 'is_active': False}

        response = self.client.put(self.detail_url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.property.id)
        self.property.refresh_from_db()
        self.assertEqual(self.property.name, 'Renamed Property')
        self.assertEqual(self.property.address, '1 Main St')
        self.assertFalse(self.property.is_active)
        self.assertEqual(Property.objects.count(), 1)

    def test_upsert_inserts_at_path_id(self):
        new_id = self.property.id + 50
        data = {'name': 'Lakeside', 'address': '5 Lake Rd'}

        response = self.client.put(self.detail(new_id), data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], new_id)
        self.assertEqual(Property.objects.get(pk=new_id).name, 'Lakeside')

    def test_upsert_ignores_body_id(self):
        other_id = self.property.id + 7
        data = {'id': other_id, 'name': 'Kept Id', 'address': '3 Same St'}

        response = self.client.put(self.detail_url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.property.id)
        self.assertFalse(Property.objects.filter(pk=other_id).exists())
        self.assertEqual(Property.objects.get(pk=self.property.id).name, 'Kept Id')

    def test_upsert_invalid_body_returns_500(self):
        response = self.client.put(self.detail_url, {'name': ''}, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.property.refresh_from_db()
        self.assertEqual(self.property.name, 'Test Property')

    def test_upsert_non_numeric_id_returns_500(self):
        data = {'name': 'Bad Id', 'address': '4 Any St'}

        response = self.client.put(self.detail('abc'), data, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertFalse(Property.objects.filter(name='Bad Id').exists())

    @mock.patch('property.models.Property.save', side_effect=DatabaseError("disk full"))
    def test_upsert_replace_store_failure_returns_500(self, _save):
        data = {'name': 'Never Saved', 'address': '1 Main St'}

        response = self.client.put(self.detail_url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'name': 'DatabaseError', 'message': 'disk full'})
        self.property.refresh_from_db()
        self.assertEqual(self.property.name, 'Test Property')
        self.assertEqual(self.property.address, '123 Test St')

    @mock.patch('property.models.Property.save', side_effect=DatabaseError("disk full"))
    def test_upsert_insert_store_failure_returns_500(self, _save):
        new_id = self.property.id + 50
        data = {'name': 'Never Saved', 'address': '5 Lake Rd'}

        response = self.client.put(self.detail(new_id), data, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'name': 'DatabaseError', 'message': 'disk full'})
        self.assertFalse(Property.objects.filter(pk=new_id).exists())
        self.assertEqual(Property.objects.count(), 1)

    def test_upsert_non_object_body_returns_500(self):
        response = self.client.put(self.detail_url, [{'name': 'X'}], format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['name'], 'InvalidResourceDocument')
        self.property.refresh_from_db()
        self.assertEqual(self.property.name, 'Test Property')


class PropertyPatchTestCase(PropertyAPITestCase):
    def test_patch_replace_changes_only_that_field(self):
        patches = [{'op': 'replace', 'path': '/name', 'value': 'X'}]

        response = self.client.patch(self.detail_url, patches, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'X')
        self.property.refresh_from_db()
        self.assertEqual(self.property.name, 'X')
        self.assertEqual(self.property.address, '123 Test St')
        self.assertEqual(self.property.description, 'Two storey block')
        self.assertTrue(self.property.is_active)

    def test_patch_applies_operations_in_order(self):
        patches = [
            {'op': 'test', 'path': '/name', 'value': 'Test Property'},
            {'op': 'replace', 'path': '/is_active', 'value': False},
            {'op': 'remove', 'path': '/description'},
            {'op': 'copy', 'from': '/address', 'path': '/description'},
        ]

        response = self.client.patch(self.detail_url, patches, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.property.refresh_from_db()
        self.assertFalse(self.property.is_active)
        self.assertEqual(self.property.description, '123 Test St')

    def test_patch_ignores_id_operations(self):
        patches = [
            {'op': 'replace', 'path': '/id', 'value': 999},
            {'op': 'replace', 'path': '/address', 'value': '8 Moved St'},
        ]

        response = self.client.patch(self.detail_url, patches, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.property.id)
        self.assertEqual(response.data['address'], '8 Moved St')
        self.assertFalse(Property.objects.filter(pk=999).exists())

    def test_patch_missing_property_is_empty_404(self):
        patches = [{'op': 'replace', 'path': '/name', 'value': 'X'}]

        response = self.client.patch(self.detail(self.property.id + 1000), patches, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.content, b'')

    def test_failed_test_operation_leaves_property_unchanged(self):
        patches = [
            {'op': 'replace', 'path': '/address', 'value': 'Should Not Persist'},
            {'op': 'test', 'path': '/name', 'value': 'Something Else'},
        ]

        response = self.client.patch(self.detail_url, patches, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['name'], 'JsonPatchTestFailed')
        self.property.refresh_from_db()
        self.assertEqual(self.property.address, '123 Test St')

    def test_replace_of_missing_field_returns_500(self):
        patches = [{'op': 'replace', 'path': '/nonexistent', 'value': 'X'}]

        response = self.client.patch(self.detail_url, patches, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    def test_malformed_operation_returns_500(self):
        response = self.client.patch(self.detail_url, [{'path': '/name', 'value': 'X'}], format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.property.refresh_from_db()
        self.assertEqual(self.property.name, 'Test Property')

    def test_non_list_body_returns_500(self):
        response = self.client.patch(self.detail_url, {'name': 'X'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['name'], 'InvalidPatchDocument')

    def test_patch_producing_invalid_property_returns_500(self):
        Property.objects.create(name="Taken Name", address="6 Other St")
        patches = [{'op': 'replace', 'path': '/name', 'value': 'Taken Name'}]

        response = self.client.patch(self.detail_url, patches, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.property.refresh_from_db()
        self.assertEqual(self.property.name, 'Test Property')

    def test_remove_clears_optional_field(self):
        response = self.client.patch(
            self.detail_url, [{'op': 'remove', 'path': '/description'}], format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['description'])
        self.property.refresh_from_db()
        self.assertIsNone(self.property.description)
        self.assertEqual(self.property.address, '123 Test St')

    def test_remove_of_defaulted_field_restores_default(self):
        Property.objects.filter(pk=self.property.pk).update(is_active=False)

        response = self.client.patch(
            self.detail_url, [{'op': 'remove', 'path': '/is_active'}], format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.property.refresh_from_db()
        self.assertTrue(self.property.is_active)

    def test_remove_of_required_field_returns_500(self):
        response = self.client.patch(
            self.detail_url, [{'op': 'remove', 'path': '/address'}], format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertIn('address', response.data['errors'])
        self.property.refresh_from_db()
        self.assertEqual(self.property.address, '123 Test St')

    @mock.patch('property.models.Property.save', side_effect=DatabaseError("disk full"))
    def test_save_failure_returns_500(self, _save):
        patches = [{'op': 'replace', 'path': '/name', 'value': 'X'}]

        response = self.client.patch(self.detail_url, patches, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'name': 'DatabaseError', 'message': 'disk full'})


class PropertyDestroyTestCase(PropertyAPITestCase):
    def test_destroy_removes_property(self):
        response = self.client.delete(self.detail_url)

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(response.content, b'')
        self.assertFalse(Property.objects.filter(pk=self.property.pk).exists())

        response = self.client.get(self.detail_url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_destroy_missing_property_is_empty_404(self):
        response = self.client.delete(self.detail(self.property.id + 1000))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.content, b'')

    @mock.patch('property.models.Property.delete', side_effect=DatabaseError("locked"))
    def test_destroy_failure_returns_500(self, _delete):
        response = self.client.delete(self.detail_url)

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['message'], 'locked')
        self.assertTrue(Property.objects.filter(pk=self.property.pk).exists())


class PropertySignalsTestCase(PropertyAPITestCase):
    def test_changes_are_logged_as_events(self):
        with self.assertLogs('property.signals', level='INFO') as logs:
            response = self.client.patch(
                self.detail_url, [{'op': 'replace', 'path': '/name', 'value': 'Y'}], format='json'
            )
            self.client.delete(self.detail_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(f"Property saved: id={self.property.id} name='Y'", logs.output[0])
        self.assertIn(f"Property removed: id={self.property.id}", logs.output[1])
