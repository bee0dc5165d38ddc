from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Property',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Unique identity name of the property', max_length=100, unique=True, verbose_name='Property name')),
                ('address', models.CharField(help_text='Physical address of the property', max_length=200, verbose_name='Address')),
                ('description', models.TextField(blank=True, help_text='Detailed description of the property', null=True, verbose_name='Description')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this property is currently active', verbose_name='Active Status')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Date and time when the property was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Date and time when the property was last updated', verbose_name='Updated At')),
            ],
            options={
                'verbose_name': 'Property',
                'verbose_name_plural': 'Properties',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['is_active'], name='property_is_active_idx')],
            },
        ),
    ]
