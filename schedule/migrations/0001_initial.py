import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Event',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('type', models.CharField(choices=[('milestone', 'Milestone'), ('deliverable', 'Deliverable'), ('label', 'Label')], default='milestone', max_length=50)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('event_date', models.DateField(db_index=True)),
                ('event_time', models.TimeField(blank=True, null=True)),
                ('visibility', models.CharField(blank=True, choices=[('internal', 'Internal'), ('external', 'External')], max_length=20, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['event_date', 'event_time'],
            },
        ),
    ]
